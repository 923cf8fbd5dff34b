"""
Entity Schemas for enzymeml-llm

The species and reaction part of the EnzymeML v2 data model, which the
database fetchers produce. Field names follow the EnzymeML document so
that fetched entities can be dropped into a document unchanged.
"""

from enum import Enum

from pydantic import BaseModel, Field


class ModifierRole(str, Enum):
    ACTIVATOR = "activator"
    ADDITIVE = "additive"
    BIOCATALYST = "biocatalyst"
    BUFFER = "buffer"
    CATALYST = "catalyst"
    INHIBITOR = "inhibitor"
    SOLVENT = "solvent"


class EquationType(str, Enum):
    ASSIGNMENT = "assignment"
    INITIAL_ASSIGNMENT = "initialAssignment"
    ODE = "ode"
    RATE_LAW = "rateLaw"


class SmallMolecule(BaseModel):
    """A small chemical compound (substrate, product or modifier)."""
    id: str = Field(description="Identifier of the small molecule")
    name: str = Field(description="Name of the small molecule")
    constant: bool = False
    vessel_id: str | None = None
    canonical_smiles: str | None = None
    inchi: str | None = None
    inchikey: str | None = None
    synonymous_names: list[str] = Field(default_factory=list)
    references: list[str] = Field(default_factory=list)


class Protein(BaseModel):
    """An enzyme or other protein involved in the experiment."""
    id: str = Field(description="Identifier of the protein")
    name: str = Field(description="Name of the protein")
    constant: bool = True
    sequence: str | None = None
    vessel_id: str | None = None
    ecnumber: str | None = None
    organism: str | None = None
    organism_tax_id: str | None = None
    references: list[str] = Field(default_factory=list)


class Variable(BaseModel):
    """A variable of an equation, such as a concentration or time."""
    id: str
    name: str
    symbol: str = Field(description="Symbol used for the variable in equations")


class Equation(BaseModel):
    """
    A mathematical equation of the reaction system.

    ``species_id`` is the left hand side, ``equation`` the right hand side.
    """
    species_id: str
    equation: str
    equation_type: EquationType
    variables: list[Variable] = Field(default_factory=list)


class ReactionElement(BaseModel):
    """A species participating in a reaction with its stoichiometry."""
    species_id: str
    stoichiometry: float = 1.0


class ModifierElement(BaseModel):
    """A species that influences a reaction without taking part in it."""
    species_id: str
    role: ModifierRole


class Reaction(BaseModel):
    """A chemical or enzymatic reaction."""
    id: str
    name: str
    reversible: bool = False
    kinetic_law: Equation | None = None
    reactants: list[ReactionElement] = Field(default_factory=list)
    products: list[ReactionElement] = Field(default_factory=list)
    modifiers: list[ModifierElement] = Field(default_factory=list)
