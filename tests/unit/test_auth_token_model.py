from models.auth_tokens import AuthToken, RecoveryMaterial, TokenVersion


def test_session_token_has_no_recovery_material():
    token = AuthToken(uid="alice", name="Firefox", token="hash", version=TokenVersion.DEFAULT)

    assert token.recovery_material is None
    assert token.can_recover_credentials is False


def test_setting_recovery_material_switches_version():
    token = AuthToken(uid="alice", name="Firefox", token="hash", version=TokenVersion.DEFAULT)
    material = RecoveryMaterial(public_key="pub", private_key="priv", password="enc")

    token.recovery_material = material

    assert token.version == TokenVersion.PUBLIC_KEY
    assert token.recovery_material == material
    assert token.public_key == "pub"


def test_clearing_recovery_material():
    token = AuthToken(uid="alice", name="Firefox", token="hash")
    token.recovery_material = RecoveryMaterial(public_key="pub", private_key="priv", password="enc")

    token.recovery_material = None

    assert token.version == TokenVersion.DEFAULT
    assert token.public_key is None
    assert token.private_key is None
    assert token.password is None


def test_is_expired():
    assert AuthToken(expires=None).is_expired(now=10**10) is False
    assert AuthToken(expires=100).is_expired(now=101) is True
    assert AuthToken(expires=100).is_expired(now=100) is False


def test_repr_hides_token_value():
    token = AuthToken(id=7, uid="alice", name="Firefox", token="super-secret-hash", type=0)

    assert "super-secret-hash" not in repr(token)
    assert "id=7" in repr(token)
