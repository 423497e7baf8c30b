from ...domain.entities import User

class IUserRepository:
    def get_by_email(self, email: str) -> User | None: ...
    def create(self, name: str, email: str, password_hash: str, role: str = "user") -> User: ...

class IPasswordHasher:
    def hash(self, plain: str) -> str: ...

class RegisterUser:
    def __init__(self, repo: IUserRepository, hasher: IPasswordHasher):
        self.repo = repo
        self.hasher = hasher

    def execute(self, name: str, email: str, password: str) -> User:
        email = email.strip().lower()
        if "@" not in email:
            raise ValueError("Invalid email")
        if not name.strip():
            raise ValueError("Name is required")
        if self.repo.get_by_email(email):
            raise ValueError("User already exists")
        pwd_hash = self.hasher.hash(password)
        return self.repo.create(name.strip(), email, pwd_hash)
