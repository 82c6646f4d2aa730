"""Tests for parameter validation."""

import math

import numpy as np
import pandas as pd
import pytest

from ssmkit import ValidationError, validate
from ssmkit.config import DDMParams, LBAParams, RDMParams
from ssmkit.validation import NON_NEGATIVE, POSITIVE, REAL, UNIT_OPEN, ParameterDomain

DDM_THETA = {"v": 1.0, "a": 0.8, "z": 0.5, "t": 0.3}


class TestParameterDomain:
    def test_contains(self):
        assert POSITIVE.contains(0.1)
        assert not POSITIVE.contains(0.0)
        assert NON_NEGATIVE.contains(0.0)
        assert not UNIT_OPEN.contains(1.0)
        assert REAL.contains(-1e9)

    def test_describe(self):
        assert POSITIVE.describe() == "must be > 0"
        assert NON_NEGATIVE.describe() == "must be >= 0"
        assert UNIT_OPEN.describe() == "must lie in (0, 1)"
        assert REAL.describe() == "must be a finite number"
        closed = ParameterDomain(0.0, 2.0, lower_inclusive=True, upper_inclusive=True)
        assert closed.describe() == "must lie in [0, 2]"


class TestValidateDDM:
    def test_valid_mapping_returns_record(self):
        spec = validate("ddm", DDM_THETA)
        assert isinstance(spec, DDMParams)
        assert spec == DDMParams(v=1.0, a=0.8, z=0.5, t=0.3, s=1.0)

    def test_record_is_immutable(self):
        spec = validate("ddm", DDM_THETA)
        with pytest.raises(AttributeError):
            spec.a = 2.0

    def test_zero_boundary_separation_is_rejected(self):
        with pytest.raises(ValidationError) as excinfo:
            validate("ddm", {**DDM_THETA, "a": 0.0})

        err = excinfo.value
        assert err.model == "ddm"
        assert err.param == "a"
        assert err.value == 0.0
        assert "α" in str(err)
        assert "must be > 0" in str(err)

    @pytest.mark.parametrize("z", [0.0, 1.0, -0.2, 1.5])
    def test_starting_point_outside_unit_interval(self, z):
        with pytest.raises(ValidationError) as excinfo:
            validate("ddm", {**DDM_THETA, "z": z})
        assert excinfo.value.param == "z"

    def test_negative_non_decision_time(self):
        with pytest.raises(ValidationError, match="'t'"):
            validate("ddm", {**DDM_THETA, "t": -0.01})

    def test_zero_non_decision_time_is_allowed(self):
        assert validate("ddm", {**DDM_THETA, "t": 0.0}).t == 0.0

    def test_negative_drift_is_allowed(self):
        assert validate("ddm", {**DDM_THETA, "v": -2.5}).v == -2.5

    @pytest.mark.parametrize("value", [math.nan, math.inf, -math.inf])
    def test_non_finite_values(self, value):
        with pytest.raises(ValidationError, match="finite"):
            validate("ddm", {**DDM_THETA, "v": value})

    def test_missing_parameter(self):
        theta = dict(DDM_THETA)
        del theta["t"]
        with pytest.raises(ValidationError, match="required") as excinfo:
            validate("ddm", theta)
        assert excinfo.value.param == "t"

    def test_unknown_parameter(self):
        with pytest.raises(ValidationError, match="not a parameter"):
            validate("ddm", {**DDM_THETA, "b": 1.0})

    def test_non_numeric_value(self):
        with pytest.raises(ValidationError, match="numeric"):
            validate("ddm", {**DDM_THETA, "v": "fast"})

    @pytest.mark.parametrize("value", ["0.8", True, np.bool_(False), None])
    def test_numeric_looking_values_are_rejected(self, value):
        with pytest.raises(ValidationError, match="numeric") as excinfo:
            validate("ddm", {**DDM_THETA, "a": value})
        assert excinfo.value.param == "a"

    def test_vector_of_strings_is_rejected(self):
        theta = {"v": ["1.0", "2.0"], "A": 0.8, "k": 0.2, "t": 0.3}
        with pytest.raises(ValidationError, match="numeric"):
            validate("lba2", theta)

    def test_integers_are_numeric(self):
        assert validate("ddm", {**DDM_THETA, "a": 2}).a == 2.0

    def test_vector_for_scalar_parameter(self):
        with pytest.raises(ValidationError, match="scalar"):
            validate("ddm", {**DDM_THETA, "a": [1.0, 2.0]})

    def test_optional_noise(self):
        assert validate("ddm", {**DDM_THETA, "s": 0.1}).s == 0.1
        with pytest.raises(ValidationError) as excinfo:
            validate("ddm", {**DDM_THETA, "s": 0.0})
        assert excinfo.value.param == "s"

    def test_numpy_scalars_are_accepted(self):
        spec = validate("ddm", {k: np.float32(v) for k, v in DDM_THETA.items()})
        assert isinstance(spec.a, float)

    def test_pandas_inputs(self):
        assert validate("ddm", pd.Series(DDM_THETA)) == validate("ddm", DDM_THETA)
        assert validate("ddm", pd.DataFrame([DDM_THETA])) == validate("ddm", DDM_THETA)

    def test_multi_row_dataframe_is_rejected(self):
        with pytest.raises(ValidationError, match="exactly one row"):
            validate("ddm", pd.DataFrame([DDM_THETA, DDM_THETA]))

    def test_non_mapping_is_rejected(self):
        with pytest.raises(ValidationError, match="mapping"):
            validate("ddm", [1.0, 0.8, 0.5, 0.3])

    def test_record_passes_through(self):
        spec = validate("ddm", DDM_THETA)
        assert validate("ddm", spec) == spec

    def test_sdv_allows_zero_variability(self):
        spec = validate("ddm_sdv", {**DDM_THETA, "sv": 0.0})
        assert spec.sv == 0.0
        with pytest.raises(ValidationError):
            validate("ddm_sdv", {**DDM_THETA, "sv": -0.1})


class TestValidateRaceModels:
    def test_lba_vectors_become_tuples(self):
        spec = validate("lba2", {"v": [3, 2], "A": 0.8, "k": 0.2, "t": 0.3})
        assert isinstance(spec, LBAParams)
        assert spec.v == (3.0, 2.0)
        assert spec.sv == (1.0, 1.0)

    def test_lba_scalar_sv_is_broadcast(self):
        spec = validate("lba3", {"v": [1, 2, 3], "A": 0.5, "k": 0.5, "t": 0.2, "sv": 0.5})
        assert spec.sv == (0.5, 0.5, 0.5)

    def test_lba_drift_vector_length(self):
        with pytest.raises(ValidationError, match="length 2"):
            validate("lba2", {"v": [3, 2, 1], "A": 0.8, "k": 0.2, "t": 0.3})

    def test_lba_scalar_drift_is_rejected(self):
        with pytest.raises(ValidationError, match="length 2"):
            validate("lba2", {"v": 3.0, "A": 0.8, "k": 0.2, "t": 0.3})

    def test_lba_negative_mean_drift_is_allowed(self):
        spec = validate("lba2", {"v": [-1.0, 2.0], "A": 0.8, "k": 0.2, "t": 0.3})
        assert spec.v[0] == -1.0

    def test_lba_requires_positive_start_range(self):
        with pytest.raises(ValidationError) as excinfo:
            validate("lba2", {"v": [3, 2], "A": 0.0, "k": 0.2, "t": 0.3})
        assert excinfo.value.param == "A"

    def test_lba_sv_element_error_names_index(self):
        with pytest.raises(ValidationError) as excinfo:
            validate(
                "lba2",
                {"v": [3, 2], "A": 0.8, "k": 0.2, "t": 0.3, "sv": [1.0, 0.0]},
            )
        assert excinfo.value.param == "sv[1]"

    def test_rdm_requires_positive_drifts(self):
        with pytest.raises(ValidationError) as excinfo:
            validate("rdm2", {"v": [1.0, 0.0], "A": 0.5, "k": 1.0, "t": 0.2})
        assert excinfo.value.param == "v[1]"

    def test_rdm_allows_zero_start_range(self):
        spec = validate("rdm3", {"v": [1, 1, 2], "A": 0.0, "k": 1.0, "t": 0.2})
        assert isinstance(spec, RDMParams)
        assert spec.A == 0.0
        assert spec.s == 1.0

    def test_rdm_requires_positive_threshold_offset(self):
        with pytest.raises(ValidationError, match="'k'"):
            validate("rdm2", {"v": [1, 1], "A": 0.5, "k": 0.0, "t": 0.2})
