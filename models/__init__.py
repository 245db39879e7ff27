from models.auth_tokens import AuthToken, RecoveryMaterial, RememberFlag, TokenType, TokenVersion

__all__ = ["AuthToken", "RecoveryMaterial", "RememberFlag", "TokenType", "TokenVersion"]
