from dataclasses import dataclass
from enum import IntEnum
from typing import Optional
from core.database import Base
from sqlalchemy import Column, Integer, SmallInteger, String, Text


class TokenType(IntEnum):
    TEMPORARY = 0
    PERSISTENT = 1


class RememberFlag(IntEnum):
    DO_NOT_REMEMBER = 0
    REMEMBER = 1


class TokenVersion(IntEnum):
    DEFAULT = 1
    PUBLIC_KEY = 2


@dataclass(frozen=True)
class RecoveryMaterial:
    """
    Keypair and the user's credential encrypted under its public half.

    All three values are opaque to the store. They are produced and consumed
    by whichever component owns the encryption scheme.
    """
    public_key: str
    private_key: str
    password: str


class AuthToken(Base):
    """
    One live login session or app-password.

    The row existing is what makes the token valid; revocation deletes it.
    Session tokens and credential-recovery tokens share the table and are
    told apart by ``version``.
    """
    __tablename__ = "authtoken"

    #pk
    id = Column(Integer, primary_key=True, index=True)

    uid = Column(String(64), nullable=False, index=True)
    login_name = Column(String(255), nullable=False, default="")
    name = Column(Text, nullable=False, default="")
    token = Column(String(200), nullable=False, unique=True, index=True)
    type = Column(SmallInteger, nullable=False, default=TokenType.TEMPORARY)
    remember = Column(SmallInteger, nullable=False, default=RememberFlag.DO_NOT_REMEMBER)
    last_activity = Column(Integer, nullable=False, default=0, index=True)
    last_check = Column(Integer, nullable=False, default=0)
    expires = Column(Integer, nullable=True)
    version = Column(SmallInteger, nullable=False, default=TokenVersion.DEFAULT)

    # Credential recovery, only populated when version == PUBLIC_KEY
    public_key = Column(Text, nullable=True)
    private_key = Column(Text, nullable=True)
    password = Column(Text, nullable=True)

    @property
    def recovery_material(self) -> Optional[RecoveryMaterial]:
        if self.version != TokenVersion.PUBLIC_KEY:
            return None
        return RecoveryMaterial(
            public_key=self.public_key,
            private_key=self.private_key,
            password=self.password,
        )

    @recovery_material.setter
    def recovery_material(self, material: Optional[RecoveryMaterial]):
        if material is None:
            self.public_key = self.private_key = self.password = None
            self.version = TokenVersion.DEFAULT
            return
        self.public_key = material.public_key
        self.private_key = material.private_key
        self.password = material.password
        self.version = TokenVersion.PUBLIC_KEY

    @property
    def can_recover_credentials(self) -> bool:
        return self.version == TokenVersion.PUBLIC_KEY

    def is_expired(self, now: int) -> bool:
        return self.expires is not None and self.expires < now

    def __repr__(self):
        # Never include the token value
        return f"<AuthToken id={self.id} uid={self.uid!r} name={self.name!r} type={self.type}>"
