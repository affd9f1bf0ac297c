"""Business settings (key/value) used by dashboards and brokerage defaults."""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from policy_crm.core.exceptions import ValidationError
from policy_crm.repositories.reference import SettingRepository

DEFAULT_SETTINGS: dict[str, float] = {
    "brokerage_percent": 15.0,
    "rep_daily_cost": 2000.0,
    "expected_conversion": 25.0,
    "premium_growth": 10.0,
}

_DESCRIPTIONS = {
    "brokerage_percent": "Brokerage earned as a percentage of total premium",
    "rep_daily_cost": "Daily cost of one sales rep (INR)",
    "expected_conversion": "Expected lead conversion percentage",
    "premium_growth": "Expected premium growth percentage",
}

# (min, max); None means unbounded
_RANGES: dict[str, tuple[float, float | None]] = {
    "brokerage_percent": (0, 100),
    "rep_daily_cost": (0, None),
    "expected_conversion": (0, 100),
    "premium_growth": (0, 100),
}

_LABELS = {
    "brokerage_percent": "Brokerage %",
    "rep_daily_cost": "Rep daily cost",
    "expected_conversion": "Expected conversion %",
    "premium_growth": "Premium growth %",
}


def settings_errors(values: dict[str, float]) -> list[str]:
    errors = []
    for key, value in values.items():
        low, high = _RANGES[key]
        if value < low or (high is not None and value > high):
            bound = f"between {low:g} and {high:g}" if high is not None else "a positive number"
            errors.append(f"{_LABELS[key]} must be {bound}")
    return errors


class SettingsService:
    def __init__(self, session: AsyncSession):
        self._repo = SettingRepository(session)

    async def get_settings(self) -> dict[str, float]:
        stored = await self._repo.as_dict()
        result = dict(DEFAULT_SETTINGS)
        for key, raw in stored.items():
            if key not in DEFAULT_SETTINGS:
                continue
            try:
                result[key] = float(raw)
            except ValueError:
                continue  # unparseable stored value: keep the default
        return result

    async def brokerage_percent(self) -> float:
        return (await self.get_settings())["brokerage_percent"]

    async def update_settings(self, values: dict[str, float | None]) -> dict[str, float]:
        changes = {k: float(v) for k, v in values.items() if v is not None and k in DEFAULT_SETTINGS}
        errors = settings_errors(changes)
        if errors:
            raise ValidationError(errors)
        for key, value in changes.items():
            await self._repo.upsert(key, f"{value:g}", _DESCRIPTIONS[key])
        return await self.get_settings()

    async def reset_settings(self) -> dict[str, float]:
        for key, value in DEFAULT_SETTINGS.items():
            await self._repo.upsert(key, f"{value:g}", _DESCRIPTIONS[key])
        return dict(DEFAULT_SETTINGS)
