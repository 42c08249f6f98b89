from __future__ import annotations

import hashlib
from dataclasses import dataclass


@dataclass(slots=True)
class SecurityService:
    salt: str

    def hash_with_salt(self, value: str) -> str:
        payload = f"{self.salt}:{value}".encode("utf-8")
        return hashlib.sha256(payload).hexdigest()
