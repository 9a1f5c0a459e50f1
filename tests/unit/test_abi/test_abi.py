"""Tests for ABI probing and the rebuild decision."""

import pytest

from electron_rebuild.core.exceptions.errors import (
    ModuleVersionParseError,
    ProbeError,
    ProcessError,
)
from electron_rebuild.rebuild.abi import (
    RUN_AS_NODE_ENV,
    ABIProbe,
    CanaryLoadResult,
    RebuildDecision,
    parse_module_version,
)


class TestParseModuleVersion:
    """Tests for module version parsing."""

    def test_digits(self):
        """Test a plain number parses."""
        assert parse_module_version("64") == "64"

    def test_trailing_newlines_removed(self):
        """Test console.log's newline is stripped."""
        assert parse_module_version("89\n") == "89"
        assert parse_module_version("89\r\n") == "89"

    @pytest.mark.parametrize("raw", ["abc", "", "12\nerror", "v89", " 89", "Segmentation fault"])
    def test_rejects_non_digits(self, raw: str):
        """Test anything but digits is rejected."""
        with pytest.raises(ModuleVersionParseError) as exc_info:
            parse_module_version(raw)

        assert exc_info.value.raw_output == raw

    @pytest.mark.parametrize("raw", ["٦٤", "²", "२३"])
    def test_rejects_non_ascii_digits(self, raw: str):
        """Test Unicode digits from other scripts are rejected."""
        with pytest.raises(ModuleVersionParseError):
            parse_module_version(raw)

    def test_parse_error_is_probe_error(self):
        """Test callers can catch parse failures as ProbeError."""
        with pytest.raises(ProbeError):
            parse_module_version("nope")


class TestABIProbe:
    """Tests for ABIProbe.query."""

    @pytest.mark.asyncio
    async def test_returns_abi(self, make_runner):
        """Test the reported ABI is returned."""
        runner = make_runner([("64\n", "")])

        assert await ABIProbe(runner=runner).query("/opt/electron") == "64"

    @pytest.mark.asyncio
    async def test_runs_electron_as_node(self, make_runner):
        """Test all run-as-node markers are set and the script is passed."""
        runner = make_runner([("89\n", "")])

        await ABIProbe(runner=runner).query("/opt/electron")

        call = runner.calls[0]
        assert call["command"] == "/opt/electron"
        assert call["args"] == ["-e", "console.log(process.versions.modules)"]
        for key, value in RUN_AS_NODE_ENV.items():
            assert call["env"][key] == value

    @pytest.mark.asyncio
    async def test_stderr_is_included(self, make_runner):
        """Test stdout and stderr are concatenated before parsing."""
        runner = make_runner([("", "89\n")])

        assert await ABIProbe(runner=runner).query("/opt/electron") == "89"

    @pytest.mark.asyncio
    async def test_garbage_output_fails(self, make_runner):
        """Test error output from the executable fails the probe."""
        runner = make_runner([("89\n", "some warning\n")])

        with pytest.raises(ModuleVersionParseError):
            await ABIProbe(runner=runner).query("/opt/electron")

    @pytest.mark.asyncio
    async def test_spawn_failure_is_probe_error(self, make_runner):
        """Test a failed spawn surfaces as ProbeError with captured output."""
        runner = make_runner([ProcessError("crash", exit_code=139, stderr="Segmentation fault")])

        with pytest.raises(ProbeError) as exc_info:
            await ABIProbe(runner=runner).query("/opt/electron")

        assert exc_info.value.stderr == "Segmentation fault"
        assert not isinstance(exc_info.value, ModuleVersionParseError)


class TestRebuildDecision:
    """Tests for RebuildDecision."""

    @pytest.fixture
    def host_settings(self, settings):
        """Settings with a fixed host ABI."""
        settings.rebuild.host_abi = "64"
        return settings

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "failure",
        [
            ProcessError("exit 1", exit_code=1),
            ProcessError("segfault", exit_code=-11),
            RuntimeError("unexpected"),
            OSError("node missing"),
        ],
    )
    async def test_canary_failure_means_rebuild(self, host_settings, make_runner, failure):
        """Test any canary failure returns True without probing Electron."""
        runner = make_runner([failure])
        decision = RebuildDecision(runner=runner, settings=host_settings)

        assert await decision.is_rebuild_needed("/opt/electron", explicit_abi="64") is True
        assert len(runner.calls) == 1

    @pytest.mark.asyncio
    async def test_canary_loads_and_abi_matches(self, host_settings, runner):
        """Test matching ABIs need no rebuild."""
        decision = RebuildDecision(runner=runner, settings=host_settings)

        assert await decision.is_rebuild_needed("/opt/electron", explicit_abi="64") is False

    @pytest.mark.asyncio
    async def test_canary_loads_and_abi_differs(self, host_settings, runner):
        """Test differing ABIs need a rebuild."""
        decision = RebuildDecision(runner=runner, settings=host_settings)

        assert await decision.is_rebuild_needed("/opt/electron", explicit_abi="89") is True

    @pytest.mark.asyncio
    async def test_canary_command(self, host_settings, runner):
        """Test the canary module is required by the host node."""
        decision = RebuildDecision(runner=runner, settings=host_settings)

        canary, failure = await decision.load_canary()

        assert canary is CanaryLoadResult.LOADED
        assert failure == ""
        assert runner.calls[0]["args"] == ["-e", 'require("nslog")']

    @pytest.mark.asyncio
    async def test_probes_electron_without_explicit_abi(self, host_settings, make_runner):
        """Test Electron is probed when no ABI is supplied."""
        runner = make_runner([("", ""), ("64\n", "")])
        decision = RebuildDecision(runner=runner, settings=host_settings)

        result = await decision.evaluate("/opt/electron")

        assert result.rebuild_needed is False
        assert result.electron_abi == "64"
        assert runner.calls[1]["command"] == "/opt/electron"

    @pytest.mark.asyncio
    async def test_queries_host_node_abi(self, settings, make_runner):
        """Test the host ABI is asked from node when not configured."""
        runner = make_runner([("", ""), ("89\n", "")])
        decision = RebuildDecision(runner=runner, settings=settings)

        result = await decision.evaluate("/opt/electron", explicit_abi="89")

        assert result.host_abi == "89"
        assert result.rebuild_needed is False
        host_call = runner.calls[1]
        assert host_call["command"] != "/opt/electron"
        assert host_call["args"] == ["-e", "console.log(process.versions.modules)"]

    @pytest.mark.asyncio
    async def test_probe_error_propagates_after_canary(self, host_settings, make_runner):
        """Test a broken Electron probe is an error, not a decision."""
        runner = make_runner([("", ""), ("not a number", "")])
        decision = RebuildDecision(runner=runner, settings=host_settings)

        with pytest.raises(ModuleVersionParseError):
            await decision.evaluate("/opt/electron")

    @pytest.mark.asyncio
    async def test_requires_executable_or_abi(self, host_settings, runner):
        """Test a decision without any Electron information fails."""
        decision = RebuildDecision(runner=runner, settings=host_settings)

        with pytest.raises(ProbeError):
            await decision.evaluate(None)

    @pytest.mark.asyncio
    async def test_result_details(self, host_settings, runner):
        """Test the detailed result carries both ABIs."""
        decision = RebuildDecision(runner=runner, settings=host_settings)

        result = await decision.evaluate("/opt/electron", explicit_abi="89")

        assert result.to_dict() == {
            "rebuild_needed": True,
            "canary": "loaded",
            "electron_abi": "89",
            "host_abi": "64",
            "reason": "Electron module version 89 differs from Node's 64",
        }
