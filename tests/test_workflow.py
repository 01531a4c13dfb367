import asyncio
from dataclasses import replace

import httpx
import pytest

from notegen.core.errors import ConfigurationError, MalformedResponse, ResearchUnavailable, UpstreamError
from notegen.core.progress import PrinterProgressListener, ProgressChannel
from notegen.models.workflow_schemas import StepEvent
from notegen.tools.tavily_websearch import TavilySearchClient
from notegen.workflows import article_creation_workflow as workflow_module
from notegen.workflows.article_creation_workflow import (
    PIPELINE_STEPS,
    ArticleCreationWorkflow,
    run_full_pipeline,
)

from conftest import FakeModelClient

STEP_AGENTS = [
    "SEO Agent",
    "Structure Agent",
    "Writing Agent",
    "Fact Check Agent",
    "Diagram Agent",
    "Social Post Agent",
]


class Recorder:
    def __init__(self):
        self.events = []

    def __call__(self, step_index, status, message):
        self.events.append((step_index, status, message))

    @property
    def pairs(self):
        return [(i, s) for i, s, _ in self.events]


def _expected_pairs(last_step):
    pairs = []
    for i in range(last_step + 1):
        pairs += [(i, "running"), (i, "done")]
    return pairs


def _run(config, settings, client, recorder, **kwargs):
    return asyncio.run(
        run_full_pipeline(settings, recorder, config=config, model_client=client, use_research=False, **kwargs)
    )


# ── successful runs ───────────────────────────────────────────────────────────

def test_pipeline_has_eight_steps():
    assert len(PIPELINE_STEPS) == 8
    assert PIPELINE_STEPS[0].name == "Research"
    assert PIPELINE_STEPS[-1].name == "Output"


def test_full_run_without_research(config, settings, fake_client):
    recorder = Recorder()
    result = _run(config, settings, fake_client, recorder)

    assert recorder.pairs == _expected_pairs(7)
    assert result.research is None
    assert result.article.title
    assert "I am an AI" not in result.article.title
    assert 0 <= result.fact_check.total_checked <= 5
    fc = result.fact_check
    assert fc.verified + fc.inaccurate + fc.unverified == fc.total_checked
    assert len(result.diagrams) == 2
    assert [c["name"] for c in fake_client.calls] == STEP_AGENTS


def test_running_events_carry_step_messages(config, settings, fake_client):
    recorder = Recorder()
    _run(config, settings, fake_client, recorder)

    running = [(i, m) for i, s, m in recorder.events if s == "running"]
    assert running == [(i, step.running_message) for i, step in enumerate(PIPELINE_STEPS)]
    assert all(m == "" for _, s, m in recorder.events if s == "done")


def test_full_run_with_research(config, settings, fake_client):
    body = {"answer": "answer", "results": [{"title": "t", "url": "https://example.com", "content": "c"}]}
    search = TavilySearchClient(config, transport=httpx.MockTransport(lambda r: httpx.Response(200, json=body)))
    recorder = Recorder()
    workflow = ArticleCreationWorkflow(config, model_client=fake_client, search_client=search, pause_seconds=0)
    result = asyncio.run(workflow.run(settings, recorder))

    assert recorder.pairs == _expected_pairs(7)
    assert result.research is not None
    assert result.research.sources[0].url == "https://example.com"
    assert [c["name"] for c in fake_client.calls] == ["Research Agent"] + STEP_AGENTS


# ── failures ──────────────────────────────────────────────────────────────────

def test_missing_credential_fails_at_step_zero(config, settings):
    client = FakeModelClient(configured=False)
    recorder = Recorder()
    with pytest.raises(ConfigurationError):
        _run(config, settings, client, recorder)

    assert recorder.pairs == [(0, "running")]
    assert client.calls == []


@pytest.mark.parametrize("failing_index", range(len(STEP_AGENTS)))
def test_first_error_stops_the_run(config, settings, failing_index):
    boom = UpstreamError("server overloaded", status_code=500)
    client = FakeModelClient({STEP_AGENTS[failing_index]: boom})
    recorder = Recorder()

    with pytest.raises(UpstreamError) as excinfo:
        _run(config, settings, client, recorder)

    assert excinfo.value is boom
    step = failing_index + 1
    assert recorder.pairs == _expected_pairs(step - 1) + [(step, "running")]
    assert [c["name"] for c in client.calls] == STEP_AGENTS[: failing_index + 1]


def test_malformed_reply_aborts_at_that_step(config, settings):
    client = FakeModelClient({"Fact Check Agent": {"totalChecked": 2}})
    recorder = Recorder()

    with pytest.raises(MalformedResponse):
        _run(config, settings, client, recorder)

    assert max(i for i, _ in recorder.pairs) == 4
    assert "Diagram Agent" not in [c["name"] for c in client.calls]


def test_research_failure_surfaces_unchanged(settings, fake_client, config):
    unconfigured = replace(config, TAVILY_API_KEY=None)
    recorder = Recorder()
    with pytest.raises(ResearchUnavailable, match="TAVILY_API_KEY"):
        asyncio.run(run_full_pipeline(settings, recorder, config=unconfigured, model_client=fake_client))
    assert recorder.pairs == [(0, "running")]


# ── progress channel ──────────────────────────────────────────────────────────

def test_channel_fans_out_and_records(config, settings, fake_client):
    channel = ProgressChannel()
    first, second = Recorder(), Recorder()
    channel.subscribe(first)
    channel.subscribe(second)

    _run(config, settings, fake_client, channel)

    assert first.events == second.events
    assert len(channel.events) == 16
    assert channel.events[0] == StepEvent(step_index=0, status="running", message=PIPELINE_STEPS[0].running_message)


def test_channel_skips_listener_that_raises():
    channel = ProgressChannel()
    recorder = Recorder()

    def broken(*args):
        raise RuntimeError("display gone")

    channel.subscribe(broken)
    channel.subscribe(recorder)
    channel(3, "running", "Writing...")

    assert recorder.events == [(3, "running", "Writing...")]


def test_channel_unsubscribe():
    channel = ProgressChannel()
    recorder = Recorder()
    channel.subscribe(recorder)
    channel.unsubscribe(recorder)
    channel(0, "done", "")
    assert recorder.events == []
    assert len(channel.events) == 1


class FakePrinter:
    def __init__(self):
        self.items = {}

    def update_item(self, item_id, content, is_done=False, hide_checkmark=False):
        self.items[item_id] = (content, is_done)


def test_printer_listener_renders_steps():
    printer = FakePrinter()
    listener = PrinterProgressListener(printer, [step.name for step in PIPELINE_STEPS])

    listener(1, "running", "Analyzing...")
    assert printer.items["step_1"] == ("🔄 SEO analysis: Analyzing...", False)
    listener(1, "done", "")
    assert printer.items["step_1"] == ("SEO analysis", True)


def test_channel_clear_between_runs(config, settings, fake_client):
    channel = ProgressChannel()
    _run(config, settings, fake_client, channel)
    channel.clear()
    assert channel.events == []

    _run(config, settings, fake_client, channel)
    assert len(channel.events) == 16


# ── interactive entry point ───────────────────────────────────────────────────

class EndTrackingPrinter(FakePrinter):
    instances = []

    def __init__(self, console):
        super().__init__()
        self.ended = 0
        EndTrackingPrinter.instances.append(self)

    def end(self):
        self.ended += 1


@pytest.fixture
def tracked_printer(monkeypatch):
    EndTrackingPrinter.instances = []
    monkeypatch.setattr(workflow_module, "Printer", EndTrackingPrinter)
    return EndTrackingPrinter.instances


def _failing_pipeline(error):
    async def run(*args, **kwargs):
        raise error

    return run


@pytest.mark.parametrize("error", [RuntimeError("unexpected"), UpstreamError("server overloaded", status_code=500)])
def test_interactive_run_stops_display_on_failure(monkeypatch, tracked_printer, config, settings, error):
    monkeypatch.setattr(workflow_module, "run_full_pipeline", _failing_pipeline(error))

    with pytest.raises(type(error)):
        asyncio.run(workflow_module._run_interactive(config, settings, use_research=False))

    assert tracked_printer[0].ended == 1


def test_interactive_run_stops_display_when_saving_fails(monkeypatch, tracked_printer, config, settings):
    class BrokenDataManager:
        def __init__(self, data_dir):
            pass

        def add_history_item(self, settings, result):
            raise OSError("disk full")

    async def pipeline(*args, **kwargs):
        return object()

    monkeypatch.setattr(workflow_module, "run_full_pipeline", pipeline)
    monkeypatch.setattr(workflow_module, "WorkflowDataManager", BrokenDataManager)

    with pytest.raises(OSError):
        asyncio.run(workflow_module._run_interactive(config, settings, use_research=False))

    assert tracked_printer[0].ended == 1


def test_main_applies_configured_log_level(monkeypatch, config):
    levels = []
    debug_config = replace(config, LOGGING_LEVEL="DEBUG")
    monkeypatch.setattr(workflow_module.Config, "from_env", classmethod(lambda cls: debug_config))
    monkeypatch.setattr(workflow_module, "setup_logging", levels.append)
    monkeypatch.setattr("builtins.input", lambda prompt="": "")

    with pytest.raises(SystemExit) as excinfo:
        workflow_module.main()

    assert excinfo.value.code == 2
    assert levels == ["DEBUG"]
