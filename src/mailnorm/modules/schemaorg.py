"""
Schema.org Models
Typed records for the JSON-LD markup commonly embedded in transactional email

A JSON-LD candidate contributes to a typed sequence only when it validates
against the model, which requires the matching ``@type``. Unknown keys are
ignored and properties that schema.org allows to repeat accept either a
single value or a list.
"""

from typing import Annotated, Any, List, Literal, Optional, Union

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, field_validator

_SCHEMA_PREFIXES = ("https://schema.org/", "http://schema.org/")


def _one_or_many(value: Any) -> Any:
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


def _strip_schema_prefix(value: Any) -> Any:
    if isinstance(value, str):
        for prefix in _SCHEMA_PREFIXES:
            if value.startswith(prefix):
                return value[len(prefix):]
    return value


class Thing(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: Optional[str] = None
    url: Optional[str] = None


class TypedThing(Thing):
    """Top-level JSON-LD node; subclasses pin ``type_`` to a Literal"""

    context: Optional[Any] = Field(default=None, alias="@context")

    @field_validator("type_", mode="before", check_fields=False)
    @classmethod
    def _normalize_type(cls, value: Any) -> Any:
        return _strip_schema_prefix(value)


class PostalAddress(Thing):
    street_address: Optional[str] = Field(default=None, alias="streetAddress")
    address_locality: Optional[str] = Field(default=None, alias="addressLocality")
    address_region: Optional[str] = Field(default=None, alias="addressRegion")
    postal_code: Optional[str] = Field(default=None, alias="postalCode")
    address_country: Optional[str] = Field(default=None, alias="addressCountry")


class Person(Thing):
    email: Optional[str] = None
    given_name: Optional[str] = Field(default=None, alias="givenName")
    family_name: Optional[str] = Field(default=None, alias="familyName")


class Airport(Thing):
    iata_code: Optional[str] = Field(default=None, alias="iataCode")


class Airline(Thing):
    iata_code: Optional[str] = Field(default=None, alias="iataCode")


class Flight(Thing):
    flight_number: Optional[str] = Field(default=None, alias="flightNumber")
    airline: Optional[Airline] = None
    departure_airport: Optional[Airport] = Field(default=None, alias="departureAirport")
    arrival_airport: Optional[Airport] = Field(default=None, alias="arrivalAirport")
    departure_time: Optional[str] = Field(default=None, alias="departureTime")
    arrival_time: Optional[str] = Field(default=None, alias="arrivalTime")


class Place(Thing):
    address: Optional[Union[str, PostalAddress]] = None


class Event(Thing):
    start_date: Optional[str] = Field(default=None, alias="startDate")
    end_date: Optional[str] = Field(default=None, alias="endDate")
    location: Optional[Union[str, Place]] = None


class Organization(TypedThing):
    """<https://schema.org/Organization>"""

    type_: Literal["Organization"] = Field(alias="@type")
    email: Optional[str] = None
    telephone: Optional[str] = None
    description: Optional[str] = None
    same_as: Annotated[List[str], BeforeValidator(_one_or_many)] = Field(
        default_factory=list, alias="sameAs"
    )


class FlightReservation(TypedThing):
    """<https://schema.org/FlightReservation>"""

    type_: Literal["FlightReservation"] = Field(alias="@type")
    reservation_number: Optional[str] = Field(default=None, alias="reservationNumber")
    reservation_status: Optional[str] = Field(default=None, alias="reservationStatus")
    under_name: Optional[Person] = Field(default=None, alias="underName")
    checkin_url: Optional[str] = Field(default=None, alias="checkinUrl")
    reservation_for: Annotated[List[Flight], BeforeValidator(_one_or_many)] = Field(
        default_factory=list, alias="reservationFor"
    )


class EventReservation(TypedThing):
    """<https://schema.org/EventReservation>"""

    type_: Literal["EventReservation"] = Field(alias="@type")
    reservation_number: Optional[str] = Field(default=None, alias="reservationNumber")
    reservation_status: Optional[str] = Field(default=None, alias="reservationStatus")
    under_name: Optional[Person] = Field(default=None, alias="underName")
    reservation_for: Optional[Event] = Field(default=None, alias="reservationFor")
