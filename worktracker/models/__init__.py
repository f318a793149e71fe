from worktracker.models.password import PasswordEntry

__all__ = ["PasswordEntry"]
