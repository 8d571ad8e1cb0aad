"""Tests for speedracer.core.result module."""

import asyncio
import dataclasses

import pytest

from speedracer.core.errors import RacerFailure
from speedracer.core.result import Err, Ok, as_result, try_result_async


class TestOk:
    """Test Ok class."""

    def test_create_ok(self):
        result = Ok(42)
        assert result.value == 42
        assert result.is_ok() is True
        assert result.is_err() is False

    def test_pattern_match(self):
        match Ok("hello"):
            case Ok(value):
                assert value == "hello"
            case Err():
                pytest.fail("Ok matched Err")

    def test_repr(self):
        assert repr(Ok(3)) == "Ok(3)"


class TestErr:
    """Test Err class."""

    def test_create_err(self):
        error = ValueError("bad")
        result = Err(error)
        assert result.error is error
        assert result.is_err() is True
        assert result.is_ok() is False

    def test_pattern_match(self):
        error = ValueError("bad")
        match Err(error):
            case Ok():
                pytest.fail("Err matched Ok")
            case Err(caught):
                assert caught is error

    def test_frozen(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            Err(ValueError("bad")).error = KeyError("k")


class TestAsResult:
    def test_plain_value_wrapped(self):
        assert as_result(7) == Ok(7)

    def test_none_is_success(self):
        assert as_result(None) == Ok(None)

    def test_ok_passes_through(self):
        ok = Ok("x")
        assert as_result(ok) is ok

    def test_err_with_exception_passes_through(self):
        err = Err(ValueError("x"))
        assert as_result(err) is err

    def test_err_with_payload_rewrapped(self):
        result = as_result(Err("flat tyre"))
        assert result.is_err()
        assert isinstance(result.error, RacerFailure)
        assert result.error.payload == "flat tyre"


class TestTryResultAsync:
    @pytest.mark.asyncio
    async def test_success(self):
        async def lap():
            await asyncio.sleep(0)
            return {"lap": 1}

        result = await try_result_async(lap())
        assert result == Ok({"lap": 1})

    @pytest.mark.asyncio
    async def test_exception_captured(self):
        async def lap():
            raise ValueError("spun out")

        result = await try_result_async(lap())
        assert result.is_err()
        assert str(result.error) == "spun out"

    @pytest.mark.asyncio
    async def test_returned_err_kept(self):
        async def lap():
            return Err(KeyError("pit"))

        result = await try_result_async(lap())
        assert isinstance(result.error, KeyError)

    @pytest.mark.asyncio
    async def test_cancellation_not_captured(self):
        async def lap():
            raise asyncio.CancelledError()

        with pytest.raises(asyncio.CancelledError):
            await try_result_async(lap())
