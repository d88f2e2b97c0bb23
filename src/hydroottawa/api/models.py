"""Response models for the Hydro Ottawa account API."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class _ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class HoAddress(_ApiModel):
    apartment: str
    city: str
    postal_code: str
    province: str
    street_name: str
    street_number: str


class HoAccountInformation(_ApiModel):
    account_id: str
    business_phone_number: str
    business_phone_number_extension: str
    home_phone_number: str
    mailing_address: HoAddress
    mobile_phone_number: str
    premise_id: str
    pseudo_name: str
    service_address: HoAddress


class HoUserInformation(_ApiModel):
    language_preference: str
    mfa_enabled: bool
    mfa_phone_number: str
    social_sign_in: bool
    username: str


class HoProfile(_ApiModel):
    account_information: HoAccountInformation
    user_information: HoUserInformation


class HoInterval(_ApiModel):
    """One hour of metered consumption."""

    start_date_time: str
    end_date_time: str
    rate_band: str
    hourly_usage: float
    hourly_cost: float


class HoSummary(_ApiModel):
    """Daily totals, broken down by time-of-use rate band."""

    account_id: str
    actual_date: str
    rate_plan: str
    billing_period_start_date: str
    billing_period_end_date: str
    total_usage: float
    total_cost: float
    hourly_average_usage: float
    hourly_average_cost: float
    total_off_peak_usage: float
    total_off_peak_cost: float
    total_mid_peak_usage: float
    total_mid_peak_cost: float
    total_on_peak_usage: float
    total_on_peak_cost: float
    total_ulo_usage: float
    total_ulo_cost: float
    number_of_hours: int


class HoHourlyUsage(_ApiModel):
    intervals: list[HoInterval]
    summary: HoSummary
