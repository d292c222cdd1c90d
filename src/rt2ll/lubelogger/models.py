from __future__ import annotations

from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field, field_validator

# LubeLogger transmits every gas record field as a string, booleans as "True"/"False".
TRUE = "True"
FALSE = "False"

# Vehicle extra fields that may name the Road Trip export, in lookup order.
CSV_FILENAME_FIELDS = ("RoadTripCSV", "CSVFilename", "filename")


def _stringify(v: Any) -> Any:
    if v is None:
        return ""
    if isinstance(v, bool):
        return TRUE if v else FALSE
    if isinstance(v, (int, float)):
        return str(v)
    return v


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class ExtraField(_WireModel):
    name: str
    value: str = ""

    @field_validator("value", mode="before")
    @classmethod
    def _coerce_value(cls, v: Any) -> Any:
        return _stringify(v)


class GasRecord(_WireModel):
    id: str = ""
    date: str = ""
    odometer: str = ""
    fuel_consumed: str = Field(default="", alias="fuelConsumed")
    cost: str = ""
    fuel_economy: str = Field(default="", alias="fuelEconomy")
    is_fill_to_full: str = Field(default=TRUE, alias="isFillToFull")
    missed_fuel_up: str = Field(default=FALSE, alias="missedFuelUp")
    notes: str = ""
    extra_fields: List[ExtraField] = Field(default_factory=list, alias="extraFields")

    @field_validator(
        "id",
        "date",
        "odometer",
        "fuel_consumed",
        "cost",
        "fuel_economy",
        "is_fill_to_full",
        "missed_fuel_up",
        "notes",
        mode="before",
    )
    @classmethod
    def _coerce_wire_strings(cls, v: Any) -> Any:
        return _stringify(v)

    @field_validator("extra_fields", mode="before")
    @classmethod
    def _null_extra_fields(cls, v: Any) -> Any:
        return [] if v is None else v

    def odometer_value(self) -> float:
        """Odometer as a number; raises ValueError for a malformed string."""
        return float(self.odometer.strip().replace(",", ""))

    def form_values(self) -> Dict[str, str]:
        """Form body for the add-gas-record endpoint."""
        values = {
            "date": self.date,
            "odometer": self.odometer,
            "fuelConsumed": self.fuel_consumed,
            "cost": self.cost,
            "fuelEconomy": self.fuel_economy,
            "isFillToFull": self.is_fill_to_full,
            "missedFuelUp": self.missed_fuel_up,
            "notes": self.notes,
        }
        for i, ef in enumerate(self.extra_fields):
            values[f"extraFields[{i}][name]"] = ef.name
            values[f"extraFields[{i}][value]"] = ef.value
        return values


class Vehicle(_WireModel):
    id: int
    year: str = ""
    make: str = ""
    model: str = ""
    license_plate: str = Field(default="", alias="licensePlate")
    extra_fields: List[ExtraField] = Field(default_factory=list, alias="extraFields")

    @field_validator("year", "make", "model", "license_plate", mode="before")
    @classmethod
    def _coerce_strings(cls, v: Any) -> Any:
        return _stringify(v)

    @field_validator("extra_fields", mode="before")
    @classmethod
    def _null_extra_fields(cls, v: Any) -> Any:
        return [] if v is None else v

    def csv_filename(self) -> str:
        for name in CSV_FILENAME_FIELDS:
            for ef in self.extra_fields:
                if ef.name == name and ef.value.strip():
                    return ef.value.strip()
        return ""

    def label(self) -> str:
        return " ".join(p for p in (self.year, self.make, self.model) if p) or f"vehicle {self.id}"


class PostResponse(_WireModel):
    success: bool
    message: str = ""

    @field_validator("message", mode="before")
    @classmethod
    def _null_message(cls, v: Any) -> Any:
        return "" if v is None else v
