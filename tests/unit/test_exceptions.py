# tests/unit/test_exceptions.py
"""Tests for the pipeline exception hierarchy."""

import pytest

from cyclistic.utils.exceptions import (
    ExtractionError,
    LoaderError,
    PipelineError,
    ProcessingError,
    SchemaError,
    VocabularyError,
    handle_pipeline_exception,
)


class TestPipelineError:
    """Test structured error data."""

    def test_to_dict(self):
        cause = ValueError("bad")
        error = VocabularyError(
            "Unknown user category",
            error_code="UNKNOWN_VOCABULARY",
            context={'stage': 'normalize', 'values': ['Dependent']},
            cause=cause
        )

        assert error.to_dict() == {
            'error_type': 'VocabularyError',
            'error_code': 'UNKNOWN_VOCABULARY',
            'stage': 'normalize',
            'message': 'Unknown user category',
            'context': {'stage': 'normalize', 'values': ['Dependent']},
            'cause': 'bad'
        }

    def test_str_includes_context_and_cause(self):
        error = SchemaError("missing columns", context={'source': 'q1.csv'}, cause=KeyError('usertype'))

        text = str(error)

        assert text.startswith("SchemaError: missing columns")
        assert "source=q1.csv" in text
        assert "Caused by" in text

    def test_stage_defaults_to_none(self):
        assert PipelineError("boom").stage is None

    def test_subclasses(self):
        for cls in (ExtractionError, SchemaError, VocabularyError, LoaderError, ProcessingError):
            assert issubclass(cls, PipelineError)


class TestHandlePipelineException:
    """Test conversion of builtin exceptions."""

    @pytest.mark.parametrize("exception, expected_type, code", [
        (FileNotFoundError("x.csv"), ExtractionError, "FILE_NOT_FOUND"),
        (PermissionError("denied"), LoaderError, "PERMISSION_DENIED"),
        (KeyError("usertype"), SchemaError, "MISSING_COLUMN"),
        (ValueError("bad value"), ProcessingError, "VALUE_ERROR"),
        (MemoryError(), ProcessingError, "MEMORY_ERROR"),
        (RuntimeError("??"), PipelineError, "UNKNOWN_ERROR"),
    ])
    def test_mapping(self, exception, expected_type, code):
        error = handle_pipeline_exception('derive', exception, {'rows': 8})

        assert type(error) is expected_type
        assert error.error_code == code
        assert error.stage == 'derive'
        assert error.context['rows'] == 8
        assert error.cause is exception

    def test_pipeline_errors_pass_through(self):
        original = SchemaError("missing", context={'stage': 'extract'})

        assert handle_pipeline_exception('normalize', original) is original
        assert original.stage == 'extract'

    def test_pipeline_error_without_stage_gets_one(self):
        original = LoaderError("disk full")

        handle_pipeline_exception('write', original)

        assert original.stage == 'write'
