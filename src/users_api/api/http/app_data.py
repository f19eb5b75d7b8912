from dataclasses import dataclass

from src.users_api.core.services import UserRegistry


@dataclass
class ApplicationDependencies:
    user_registry: UserRegistry
