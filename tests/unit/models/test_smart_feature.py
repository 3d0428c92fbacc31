"""
Unit tests for models.smart_feature module.

Tests:
- Construction defaults
- to_db_params() column order and serialization
- from_db_row() enum conversion and NULL coercion
"""

from datetime import UTC, datetime
from uuid import uuid4

import pytest

from smarthub.models import ProtocolType, SmartFeature, SmartFeatureDbParams


class TestConstruction:
    """Dataclass construction."""

    def test_parameters_default_empty(self):
        now = datetime.now(UTC)
        feature = SmartFeature(
            id=uuid4(),
            model_id=uuid4(),
            name="Zoom",
            description="Zoom lens",
            protocol=ProtocolType.MQTT,
            interface_path="/zoom",
            created_at=now,
            updated_at=now,
        )
        assert feature.parameters == {}

    def test_model_id_may_be_none(self):
        now = datetime.now(UTC)
        feature = SmartFeature(
            id=uuid4(),
            model_id=None,
            name="Zoom",
            description="Zoom lens",
            protocol=ProtocolType.GRPC,
            interface_path="/zoom",
            created_at=now,
            updated_at=now,
        )
        assert feature.model_id is None


class TestToDbParams:
    """to_db_params() serialization."""

    def test_column_order(self, sample_feature):
        params = sample_feature.to_db_params()
        assert isinstance(params, SmartFeatureDbParams)
        assert params._fields == (
            "id",
            "model_id",
            "name",
            "description",
            "protocol",
            "interface_path",
            "parameters",
            "created_at",
            "updated_at",
        )

    def test_protocol_as_plain_string(self, sample_feature):
        assert sample_feature.to_db_params().protocol == "rest"


class TestFromDbRow:
    """from_db_row() deserialization."""

    def test_roundtrip(self, sample_feature, feature_row):
        assert SmartFeature.from_db_row(feature_row) == sample_feature

    def test_null_parameters_become_empty(self, feature_row):
        feature_row["parameters"] = None
        assert SmartFeature.from_db_row(feature_row).parameters == {}

    def test_unknown_protocol_raises(self, feature_row):
        feature_row["protocol"] = "carrier-pigeon"
        with pytest.raises(ValueError):
            SmartFeature.from_db_row(feature_row)
