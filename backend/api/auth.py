import json
import threading
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Optional, Union

from jose import jwt, JWTError
from passlib.context import CryptContext

import config


class AuthHandler:
    """
    Credential handling: password hashing, JWT issue/verify and the user file
    """

    def __init__(self, users_file: Optional[Union[str, Path]] = None,
                 secret_key: Optional[str] = None,
                 bcrypt_rounds: Optional[int] = None):
        self.pwd_context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=bcrypt_rounds or config.BCRYPT_ROUNDS,
        )
        self.secret_key = secret_key or config.JWT_SECRET_KEY
        self.algorithm = config.JWT_ALGORITHM
        self.access_token_expire_minutes = config.ACCESS_TOKEN_EXPIRE_MINUTES

        # Simple file storage
        self.users_file = Path(users_file) if users_file else config.DATA_DIR / "users.json"
        self.users_file.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()

        self._init_users_data()

    def _init_users_data(self):
        """
        Create the user file if it does not exist yet
        """
        if not self.users_file.exists():
            with open(self.users_file, 'w', encoding='utf-8') as f:
                json.dump({}, f, ensure_ascii=False, indent=2)

    def _load_users(self) -> dict:
        try:
            with open(self.users_file, 'r', encoding='utf-8') as f:
                return json.load(f)
        except (FileNotFoundError, json.JSONDecodeError):
            return {}

    def _save_users(self, users: dict):
        with open(self.users_file, 'w', encoding='utf-8') as f:
            json.dump(users, f, ensure_ascii=False, indent=2)

    def verify_password(self, plain_password: str, hashed_password: str) -> bool:
        return self.pwd_context.verify(plain_password, hashed_password)

    def get_password_hash(self, password: str) -> str:
        return self.pwd_context.hash(password)

    def create_access_token(self, data: dict, expires_delta: Optional[timedelta] = None) -> str:
        """
        Issue a signed access token
        """
        to_encode = data.copy()
        if expires_delta:
            expire = datetime.now(timezone.utc) + expires_delta
        else:
            expire = datetime.now(timezone.utc) + timedelta(minutes=self.access_token_expire_minutes)

        to_encode.update({"exp": expire})
        return jwt.encode(to_encode, self.secret_key, algorithm=self.algorithm)

    def verify_token(self, token: str) -> Optional[str]:
        """
        Verify a token and return its user id
        """
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
            user_id = payload.get("sub")
            if user_id is None or not isinstance(user_id, str):
                return None
            return user_id
        except JWTError:
            return None

    def token_expiry(self, token: str) -> Optional[float]:
        """Expiry of a valid token as a unix timestamp"""
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except JWTError:
            return None
        exp = payload.get("exp")
        return float(exp) if isinstance(exp, (int, float)) else None

    def _user_info(self, user: dict) -> dict:
        return {
            "id": user["user_id"],
            "email": user["email"],
            "created_at": user["created_at"],
        }

    async def register(self, email: str, password: str) -> dict:
        """
        Create an account and sign it in

        Raises:
            ValueError: duplicate email, malformed email or short password
        """
        email = (email or "").strip().lower()

        # Simple email check
        if "@" not in email or "." not in email:
            raise ValueError("Invalid email address")

        if len(password or "") < 6:
            raise ValueError("Password must be at least 6 characters")

        with self._lock:
            users = self._load_users()
            if email in users:
                raise ValueError("User already exists")

            user_id = f"user_{len(users) + 1}_{int(datetime.now().timestamp())}"
            users[email] = {
                "user_id": user_id,
                "email": email,
                "password_hash": self.get_password_hash(password),
                "created_at": datetime.now().isoformat(),
            }
            self._save_users(users)

        access_token = self.create_access_token(data={"sub": user_id})

        return {
            "success": True,
            "data": {
                "token": access_token,
                "user": self._user_info(users[email])
            },
            "message": "Registration successful"
        }

    async def login(self, email: str, password: str) -> dict:
        """
        Check credentials and issue a token

        Raises:
            ValueError: unknown user or wrong password
        """
        email = (email or "").strip().lower()

        with self._lock:
            users = self._load_users()
            if email not in users:
                raise ValueError("User does not exist")

            user = users[email]
            if not self.verify_password(password or "", user["password_hash"]):
                raise ValueError("Incorrect password")

            user["last_login"] = datetime.now().isoformat()
            self._save_users(users)

        access_token = self.create_access_token(data={"sub": user["user_id"]})

        return {
            "success": True,
            "data": {
                "token": access_token,
                "user": self._user_info(user)
            },
            "message": "Login successful"
        }

    def get_user_by_id(self, user_id: str) -> Optional[dict]:
        """
        Look up a user by id, without the password hash
        """
        users = self._load_users()

        for user in users.values():
            if user["user_id"] == user_id:
                user_info = self._user_info(user)
                user_info["last_login"] = user.get("last_login")
                return user_info

        return None
