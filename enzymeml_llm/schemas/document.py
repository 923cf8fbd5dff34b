"""
Document Schemas for enzymeml-llm

The EnzymeML v2 document: the root container of an enzymatic experiment,
holding its vessels, species, reactions, measurements, equations and
parameters. It is the natural ``schema`` for ``extract_data``.

JSON-LD annotations (``@context``, ``@id``, ``@type``) are not modelled.
"""

from enum import Enum

from pydantic import BaseModel, Field

from .entities import (
    Equation,
    EquationType,
    ModifierElement,
    ModifierRole,
    Protein,
    Reaction,
    ReactionElement,
    SmallMolecule,
    Variable,
)


class DataTypes(str, Enum):
    ABSORBANCE = "absorbance"
    AMOUNT = "amount"
    CONCENTRATION = "concentration"
    CONVERSION = "conversion"
    FLUORESCENCE = "fluorescence"
    PEAK_AREA = "peakarea"
    TRANSMITTANCE = "transmittance"
    TURNOVER = "turnover"
    YIELD = "yield"


class UnitType(str, Enum):
    AMPERE = "ampere"
    AVOGADRO = "avogadro"
    BECQUEREL = "becquerel"
    CANDELA = "candela"
    CELSIUS = "celsius"
    COULOMB = "coulomb"
    DIMENSIONLESS = "dimensionless"
    FARAD = "farad"
    GRAM = "gram"
    GRAY = "gray"
    HENRY = "henry"
    HERTZ = "hertz"
    ITEM = "item"
    JOULE = "joule"
    KATAL = "katal"
    KELVIN = "kelvin"
    KILOGRAM = "kilogram"
    LITRE = "litre"
    LUMEN = "lumen"
    LUX = "lux"
    METRE = "metre"
    MOLE = "mole"
    NEWTON = "newton"
    OHM = "ohm"
    PASCAL = "pascal"
    RADIAN = "radian"
    SECOND = "second"
    SIEMENS = "siemens"
    SIEVERT = "sievert"
    STERADIAN = "steradian"
    TESLA = "tesla"
    VOLT = "volt"
    WATT = "watt"
    WEBER = "weber"


# =============================================================================
# Units
# =============================================================================


class BaseUnit(BaseModel):
    """One SI base unit of a unit definition."""
    kind: UnitType
    exponent: float
    multiplier: float | None = None
    scale: float | None = None


class UnitDefinition(BaseModel):
    """A unit built from SI base units, e.g. mmol / l."""
    id: str | None = None
    name: str | None = Field(default=None, description="Common name of the unit")
    base_units: list[BaseUnit] = Field(default_factory=list)


# =============================================================================
# Experiment setup
# =============================================================================


class Creator(BaseModel):
    """An author or contributor of the document."""
    given_name: str
    family_name: str
    mail: str


class Vessel(BaseModel):
    """A container the experiment ran in, such as a cuvette or microplate."""
    id: str
    name: str
    volume: float
    unit: UnitDefinition
    constant: bool = True


class Complex(BaseModel):
    """A group of species, e.g. an enzyme-substrate complex or a buffer mix."""
    id: str
    name: str
    constant: bool = False
    vessel_id: str | None = None
    participants: list[str] = Field(default_factory=list, description="IDs of the grouped species")


class Parameter(BaseModel):
    """A kinetic parameter with its estimate, bounds and uncertainty."""
    id: str
    name: str
    symbol: str
    value: float | None = None
    unit: UnitDefinition | None = None
    initial_value: float | None = None
    upper_bound: float | None = None
    lower_bound: float | None = None
    stderr: float | None = None
    constant: bool | None = True


# =============================================================================
# Measurements
# =============================================================================


class MeasurementData(BaseModel):
    """
    Time course of one species within a measurement.

    Endpoint data is a time course with a single data point. ``initial``
    must match the first value of ``data``; ``prepared`` is the amount put
    into the reaction mix.
    """
    species_id: str
    prepared: float | None = None
    initial: float | None = None
    data_unit: UnitDefinition | None = None
    data: list[float] = Field(default_factory=list)
    time: list[float] = Field(default_factory=list)
    time_unit: UnitDefinition | None = None
    data_type: DataTypes | None = None
    is_simulated: bool | None = False


class Measurement(BaseModel):
    """One measurement run, optionally grouped with others by ``group_id``."""
    id: str
    name: str
    species_data: list[MeasurementData] = Field(default_factory=list)
    group_id: str | None = None
    ph: float | None = None
    temperature: float | None = None
    temperature_unit: UnitDefinition | None = None


class EnzymeMLDocument(BaseModel):
    """Root object of an EnzymeML v2 document."""
    version: str = "2.0"
    description: str | None = None
    name: str = Field(description="Title of the document")
    created: str | None = None
    modified: str | None = None
    creators: list[Creator] = Field(default_factory=list)
    vessels: list[Vessel] = Field(default_factory=list)
    proteins: list[Protein] = Field(default_factory=list)
    complexes: list[Complex] = Field(default_factory=list)
    small_molecules: list[SmallMolecule] = Field(default_factory=list)
    reactions: list[Reaction] = Field(default_factory=list)
    measurements: list[Measurement] = Field(default_factory=list)
    equations: list[Equation] = Field(default_factory=list)
    parameters: list[Parameter] = Field(default_factory=list)
    references: list[str] = Field(default_factory=list)


__all__ = [
    "BaseUnit",
    "Complex",
    "Creator",
    "DataTypes",
    "EnzymeMLDocument",
    "Equation",
    "EquationType",
    "Measurement",
    "MeasurementData",
    "ModifierElement",
    "ModifierRole",
    "Parameter",
    "Protein",
    "Reaction",
    "ReactionElement",
    "SmallMolecule",
    "UnitDefinition",
    "UnitType",
    "Variable",
    "Vessel",
]
