"""Retrieval and storage of user display preferences."""
from __future__ import annotations

from sqlalchemy.orm import Session

from devicekey_auth.models.preferences import UserPreferencesRecord
from devicekey_auth.schemas.preferences import UserPreferences

__all__ = ["PreferencesService"]


class PreferencesService:
    """Read and write the preferences attached to auth responses."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get_preferences(self, email: str) -> UserPreferences:
        """Return stored preferences, or an all-default object when none exist."""
        record = self.session.get(UserPreferencesRecord, email)
        if record is None:
            return UserPreferences()
        return UserPreferences.model_validate(record)

    def set_preferences(self, email: str, preferences: UserPreferences) -> UserPreferences:
        """Insert or replace the preferences of `email`."""
        record = self.session.get(UserPreferencesRecord, email)
        if record is None:
            record = UserPreferencesRecord(email=email)
            self.session.add(record)
        for field, value in preferences.model_dump().items():
            setattr(record, field, value)
        self.session.flush()
        return UserPreferences.model_validate(record)
