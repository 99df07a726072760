from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from loguru import logger

from config.company import CompanyConfig, RentalRules
from config.settings import settings as app_settings
from database.base import async_session_factory
from database.models.settings import SETTINGS_ROW_ID, CompanySettings, RentalSettings

COMPANY_FIELDS = {
    "name", "gstin", "address", "phone", "email",
    "tax_rate", "security_deposit_percent", "late_fee_per_day", "currency",
}
RENTAL_FIELDS = {
    "allow_hourly", "allow_daily", "allow_weekly",
    "min_rental_hours", "max_rental_days", "advance_booking_days",
}


class SettingsService:
    """Company profile and rental rules stored in the database"""

    def __init__(self, session_factory=async_session_factory, defaults: CompanyConfig = None):
        self.session_factory = session_factory
        self.defaults = defaults or app_settings.company_config()

    def _default_company(self) -> CompanySettings:
        return CompanySettings(
            name=self.defaults.name,
            tax_rate=self.defaults.tax_rate,
            security_deposit_percent=self.defaults.security_deposit_percent,
            late_fee_per_day=self.defaults.late_fee_per_day,
            currency=self.defaults.currency,
        )

    def _default_rental(self) -> RentalSettings:
        rules = RentalRules()
        return RentalSettings(**rules.model_dump())

    async def _load(self, session, model, factory):
        row = await session.get(model, SETTINGS_ROW_ID)
        if row is None:
            # Create defaults on first read
            row = factory()
            row.id = SETTINGS_ROW_ID
            session.add(row)
            try:
                await session.flush()
            except IntegrityError:
                # a concurrent first read created the row
                await session.rollback()
                logger.debug(f"{model.__tablename__} row created concurrently, reloading")
                row = await session.get(model, SETTINGS_ROW_ID)
        return row

    async def get_company_settings(self) -> CompanySettings:
        """Get the company profile, creating it from environment defaults if missing"""
        async with self.session_factory() as session:
            company = await self._load(session, CompanySettings, self._default_company)
            await session.commit()
            return company

    async def get_company_config(self) -> CompanyConfig:
        company = await self.get_company_settings()
        return company.to_config(
            quotation_validity_days=self.defaults.quotation_validity_days,
            invoice_due_days=self.defaults.invoice_due_days,
        )

    async def update_company_settings(self, **fields) -> CompanyConfig:
        """Update only the given fields; rates are validated before anything is written"""
        unknown = set(fields) - COMPANY_FIELDS
        if unknown:
            raise ValueError(f"Unknown company settings: {', '.join(sorted(unknown))}")

        async with self.session_factory() as session:
            try:
                company = await self._load(session, CompanySettings, self._default_company)
                update_data = {key: value for key, value in fields.items() if value is not None}

                # Validate the merged result
                current = company.to_config().model_dump()
                current.update({key: value for key, value in update_data.items() if key in current})
                CompanyConfig(**current)

                if update_data:
                    await session.execute(
                        update(CompanySettings)
                        .where(CompanySettings.id == company.id)
                        .values(**update_data)
                    )
                await session.commit()
            except Exception:
                await session.rollback()
                logger.exception("Error updating company settings")
                raise

        logger.info(f"Company settings updated: {', '.join(sorted(update_data)) or 'nothing'}")
        return await self.get_company_config()

    async def get_rental_rules(self) -> RentalRules:
        async with self.session_factory() as session:
            rental = await self._load(session, RentalSettings, self._default_rental)
            await session.commit()
            return rental.to_rules()

    async def update_rental_settings(self, **fields) -> RentalRules:
        """Update booking rules (allowed periods and limits)"""
        unknown = set(fields) - RENTAL_FIELDS
        if unknown:
            raise ValueError(f"Unknown rental settings: {', '.join(sorted(unknown))}")

        async with self.session_factory() as session:
            try:
                rental = await self._load(session, RentalSettings, self._default_rental)
                update_data = {key: value for key, value in fields.items() if value is not None}

                merged = rental.to_rules().model_dump()
                merged.update(update_data)
                RentalRules(**merged)

                if update_data:
                    await session.execute(
                        update(RentalSettings)
                        .where(RentalSettings.id == rental.id)
                        .values(**update_data)
                    )
                await session.commit()
            except Exception:
                await session.rollback()
                logger.exception("Error updating rental settings")
                raise

        return await self.get_rental_rules()
