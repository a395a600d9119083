from passlib.context import CryptContext

bcrypt_context = CryptContext(schemes=['bcrypt'], deprecated='auto')

# Bcrypt only looks at the first 72 bytes of a secret
BCRYPT_MAX_LENGTH = 72


def get_password_hash(password: str) -> str:
    return bcrypt_context.hash(password[:BCRYPT_MAX_LENGTH])


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return bcrypt_context.verify(plain_password[:BCRYPT_MAX_LENGTH], hashed_password)
