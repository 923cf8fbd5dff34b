"""Unit tests for the EnzymeML document schemas."""

import pytest
from pydantic import ValidationError

from enzymeml_llm.core.llm_client import build_response_format
from enzymeml_llm.schemas.document import (
    DataTypes,
    EnzymeMLDocument,
    Measurement,
    MeasurementData,
    UnitDefinition,
    UnitType,
)
from enzymeml_llm.schemas.entities import (
    EquationType,
    ModifierElement,
    ModifierRole,
    Protein,
    Reaction,
    ReactionElement,
    SmallMolecule,
)


@pytest.fixture
def document():
    return EnzymeMLDocument(
        name="Hexokinase kinetics",
        proteins=[Protein(id="p0", name="Hexokinase", ecnumber="2.7.1.1")],
        small_molecules=[
            SmallMolecule(id="s0", name="glucose"),
            SmallMolecule(id="s1", name="glucose 6-phosphate"),
        ],
        reactions=[Reaction(
            id="r0",
            name="phosphorylation",
            reactants=[ReactionElement(species_id="s0", stoichiometry=1)],
            products=[ReactionElement(species_id="s1", stoichiometry=1)],
            modifiers=[ModifierElement(species_id="p0", role="biocatalyst")],
        )],
    )


class TestEnzymeMLDocument:
    """Tests for the document model."""

    def test_defaults(self):
        doc = EnzymeMLDocument(name="Empty")
        assert doc.version == "2.0"
        assert doc.reactions == []

    def test_enum_values_are_parsed(self, document):
        assert document.reactions[0].modifiers[0].role is ModifierRole.BIOCATALYST

    def test_unknown_modifier_role_rejected(self):
        with pytest.raises(ValidationError):
            ModifierElement(species_id="p0", role="spectator")

    def test_round_trips_through_json(self, document):
        """Test a serialized document validates back unchanged."""
        assert EnzymeMLDocument.model_validate_json(document.model_dump_json()) == document

    def test_reaction_with_kinetic_law(self):
        reaction = Reaction.model_validate({
            "id": "r0",
            "name": "phosphorylation",
            "kinetic_law": {
                "species_id": "s1",
                "equation": "kcat * p0 * s0 / (Km + s0)",
                "equation_type": "rateLaw",
            },
        })
        assert reaction.kinetic_law.equation_type is EquationType.RATE_LAW
        assert reaction.kinetic_law.variables == []

    def test_measurement_data(self):
        measurement = Measurement(
            id="m0",
            name="Run 1",
            species_data=[MeasurementData(
                species_id="s0", initial=1.0, data=[1.0, 0.5], time=[0, 10],
                data_unit=UnitDefinition(name="mM"), data_type="concentration",
            )],
        )
        data = measurement.species_data[0]
        assert data.data_type is DataTypes.CONCENTRATION
        assert data.time == [0.0, 10.0]
        assert data.is_simulated is False

    def test_base_unit_kind(self):
        unit = UnitDefinition.model_validate(
            {"name": "mM", "base_units": [{"kind": "mole", "exponent": 1, "scale": -3}]}
        )
        assert unit.base_units[0].kind is UnitType.MOLE

    def test_usable_as_response_format(self):
        """Test the document binds as a structured-output schema."""
        response_format = build_response_format(EnzymeMLDocument, "enzymeml_document")
        assert response_format["json_schema"]["name"] == "enzymeml_document"
