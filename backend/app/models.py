from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class OuraDocument(BaseModel):
    model_config = ConfigDict(extra="ignore")


class SleepContributors(OuraDocument):
    deep_sleep: Optional[int] = None
    efficiency: Optional[int] = None
    latency: Optional[int] = None
    rem_sleep: Optional[int] = None
    restfulness: Optional[int] = None
    timing: Optional[int] = None
    total_sleep: Optional[int] = None


class DailySleep(OuraDocument):
    id: Optional[str] = None
    day: str
    score: Optional[int] = None
    contributors: Optional[SleepContributors] = Field(
        default_factory=SleepContributors
    )
    timestamp: Optional[str] = None


class ActivityContributors(OuraDocument):
    meet_daily_targets: Optional[int] = None
    move_every_hour: Optional[int] = None
    recovery_time: Optional[int] = None
    stay_active: Optional[int] = None
    training_frequency: Optional[int] = None
    training_volume: Optional[int] = None


class DailyActivity(OuraDocument):
    id: Optional[str] = None
    day: str
    score: Optional[int] = None
    steps: Optional[int] = None
    active_calories: Optional[int] = None
    total_calories: Optional[int] = None
    contributors: Optional[ActivityContributors] = Field(
        default_factory=ActivityContributors
    )
    timestamp: Optional[str] = None


class DailyStress(OuraDocument):
    id: Optional[str] = None
    day: str
    stress_high: Optional[int] = None
    recovery_high: Optional[int] = None
    day_summary: Optional[str] = None


class ReadinessContributors(OuraDocument):
    activity_balance: Optional[int] = None
    body_temperature: Optional[int] = None
    hrv_balance: Optional[int] = None
    previous_day_activity: Optional[int] = None
    previous_night: Optional[int] = None
    recovery_index: Optional[int] = None
    resting_heart_rate: Optional[int] = None
    sleep_balance: Optional[int] = None


class DailyReadiness(OuraDocument):
    id: Optional[str] = None
    day: str
    score: Optional[int] = None
    temperature_deviation: Optional[float] = None
    temperature_trend_deviation: Optional[float] = None
    contributors: Optional[ReadinessContributors] = Field(
        default_factory=ReadinessContributors
    )
    timestamp: Optional[str] = None


class PersonalInfo(OuraDocument):
    id: str
    age: Optional[int] = None
    weight: Optional[float] = None
    height: Optional[float] = None
    biological_sex: Optional[str] = None
    email: Optional[str] = None
