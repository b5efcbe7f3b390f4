"""
Settings resolver.

Reads the two singleton settings documents. Reads never fail: a missing
document, a store failure, a missing field or an invalid stored value all
resolve to defaults. The hostel defaults come from a named profile because
the allocation path and the administration screen historically disagreed
on them.
"""

from typing import Any, Dict, Optional

from pydantic import ValidationError as PydanticValidationError

from hostel_portal.core.exceptions import BaseAppException
from hostel_portal.repositories.settings_repository import (
    ApplicationSettingsRepository,
    HostelSettingsRepository,
)
from hostel_portal.schemas.common.enums import ApplicationWindowStatus, SettingsProfile
from hostel_portal.schemas.settings import (
    ApplicationCountdown,
    ApplicationSettings,
    ApplicationSettingsUpdate,
    HostelSettings,
    HostelSettingsUpdate,
)
from hostel_portal.services.base.base_service import BaseService
from hostel_portal.utils.datetime_utils import format_time_remaining, parse_datetime, to_iso

ADMIN_PROFILE_GRACE_PERIOD_HOURS = 24

_NUMERIC_FIELDS = ("paymentGracePeriod", "maxRoomCapacity")
_FLAG_FIELDS = ("autoRevokeUnpaidAllocations", "allowMixedGender")


class SettingsService(BaseService):
    """Resolve and update hostel and application-window settings."""

    def __init__(self, store, clock=None, app_settings=None, profile: Optional[SettingsProfile] = None):
        super().__init__(store, clock, app_settings)
        self.profile = profile or SettingsProfile(self.config.SETTINGS_DEFAULT_PROFILE)
        self.hostel_settings = HostelSettingsRepository(store)
        self.application_settings = ApplicationSettingsRepository(store)

    # ==================== Hostel Settings ====================

    def default_settings(self) -> HostelSettings:
        if self.profile == SettingsProfile.ADMIN:
            return HostelSettings(
                payment_grace_period=ADMIN_PROFILE_GRACE_PERIOD_HOURS,
                auto_revoke_unpaid_allocations=False,
                max_room_capacity=self.config.DEFAULT_MAX_ROOM_CAPACITY,
                allow_mixed_gender=False,
            )
        return HostelSettings(
            payment_grace_period=self.config.DEFAULT_PAYMENT_GRACE_PERIOD_HOURS,
            auto_revoke_unpaid_allocations=True,
            max_room_capacity=self.config.DEFAULT_MAX_ROOM_CAPACITY,
            allow_mixed_gender=False,
        )

    def _merge_with_defaults(self, stored: Dict[str, Any]) -> HostelSettings:
        merged = self.default_settings().to_document()
        for key in _NUMERIC_FIELDS:
            if stored.get(key):
                merged[key] = stored[key]
        for key in _FLAG_FIELDS:
            if stored.get(key) is not None:
                merged[key] = stored[key]
        merged["updatedAt"] = stored.get("updatedAt")
        try:
            return HostelSettings.model_validate(merged)
        except PydanticValidationError as e:
            invalid = sorted({str(error["loc"][0]) for error in e.errors() if error["loc"]})
            self._logger.error(f"Invalid stored hostel settings {invalid}; using defaults for them")
            defaults = self.default_settings().to_document()
            for key in invalid:
                merged[key] = defaults.get(key)
            return HostelSettings.model_validate(merged)

    def get_settings(self) -> HostelSettings:
        """
        Current hostel settings.

        Defaults are returned, not persisted, when the document is absent.
        """
        try:
            stored = self.hostel_settings.fetch()
            if stored is None:
                return self.default_settings()
            return self._merge_with_defaults(stored)
        except BaseAppException as e:
            self._logger.error(f"Error fetching hostel settings: {e}", exc_info=True)
            return self.default_settings()

    def update_settings(self, update: HostelSettingsUpdate) -> HostelSettings:
        """Merge ``update`` onto the current settings and upsert the document."""
        current = self.get_settings().to_document()
        current.update(update.changes())
        current["updatedAt"] = to_iso(self.now())
        stored = self.hostel_settings.upsert(current)
        self._logger.info("Hostel settings updated", extra={"changes": list(update.changes())})
        return HostelSettings.model_validate(stored)

    # ==================== Application Window ====================

    def get_application_settings(self) -> ApplicationSettings:
        try:
            stored = self.application_settings.fetch()
        except BaseAppException as e:
            self._logger.error(f"Error fetching application settings: {e}", exc_info=True)
            return ApplicationSettings()
        if stored is None:
            return ApplicationSettings()

        return ApplicationSettings(
            boy_limit=stored.get("boyLimit") or 0,
            girl_limit=stored.get("girlLimit") or 0,
            auto_accept_boys_limit=stored.get("autoAcceptBoysLimit") or 0,
            auto_accept_girls_limit=stored.get("autoAcceptGirlsLimit") or 0,
            start_date_time=parse_datetime(stored.get("startDateTime")),
            end_date_time=parse_datetime(stored.get("endDateTime")),
            updated_at=parse_datetime(stored.get("updatedAt")),
        )

    def update_application_settings(self, update: ApplicationSettingsUpdate) -> ApplicationSettings:
        current = self.get_application_settings().to_document()
        current.update(update.changes())
        current["updatedAt"] = to_iso(self.now())
        stored = self.application_settings.upsert(current)
        return ApplicationSettings.model_validate(stored)

    def are_applications_open(self) -> bool:
        window = self.get_application_settings()
        if window.start_date_time is None or window.end_date_time is None:
            return False
        return window.start_date_time <= self.now() <= window.end_date_time

    def get_application_countdown(self) -> ApplicationCountdown:
        window = self.get_application_settings()
        if window.start_date_time is None or window.end_date_time is None:
            return ApplicationCountdown(
                status=ApplicationWindowStatus.CLOSED,
                time_remaining="No application period set",
            )

        now = self.now()
        if now < window.start_date_time:
            return ApplicationCountdown(
                status=ApplicationWindowStatus.UPCOMING,
                target_date=window.start_date_time,
                time_remaining=format_time_remaining(now, window.start_date_time),
            )
        if now <= window.end_date_time:
            return ApplicationCountdown(
                status=ApplicationWindowStatus.OPEN,
                target_date=window.end_date_time,
                time_remaining=format_time_remaining(now, window.end_date_time),
            )
        return ApplicationCountdown(
            status=ApplicationWindowStatus.CLOSED,
            time_remaining="Application period has ended",
        )
