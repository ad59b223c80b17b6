"""
Tests for per-item processing and the continue-on-fail policy.
"""

import pytest

from fuse_elevenlabs.workflows.engine.definitions import PairedItem, WorkflowItem
from fuse_elevenlabs.workflows.engine.error_handler import (
    ErrorCategory,
    ErrorClassifier,
    ErrorPolicyHandler,
)
from fuse_elevenlabs.workflows.engine.errors import (
    CredentialError,
    NodeApiError,
    NodeOperationError,
)
from fuse_elevenlabs.workflows.engine.executor import process_items


def make_items(count):
    return [WorkflowItem(json={"n": i}) for i in range(count)]


class Recorder:
    """Handler that echoes items and fails on chosen indices."""

    def __init__(self, fail_on=(), error=None):
        self.fail_on = set(fail_on)
        self.error = error or NodeApiError("ElevenLabs API error 500: boom", status_code=500)
        self.attempted = []

    async def __call__(self, item, index):
        self.attempted.append(index)
        if index in self.fail_on:
            raise self.error
        return WorkflowItem(json={"echo": item.json_data["n"]}, pairedItem=PairedItem(item=index))


@pytest.mark.asyncio
@pytest.mark.parametrize("count", [0, 1, 3, 7])
async def test_all_items_succeed(count):
    handler = Recorder()

    outputs = await process_items(make_items(count), handler, continue_on_fail=True)

    assert len(outputs) == count
    assert [o.paired_item.item for o in outputs] == list(range(count))
    assert handler.attempted == list(range(count))


@pytest.mark.asyncio
async def test_continue_on_fail_records_error_item():
    handler = Recorder(fail_on={2})

    outputs = await process_items(make_items(5), handler, continue_on_fail=True)

    assert len(outputs) == 5
    assert outputs[2].json_data == {"error": "ElevenLabs API error 500: boom"}
    assert outputs[2].binary_data == {}
    assert outputs[2].paired_item.item == 2
    for i in (0, 1, 3, 4):
        assert outputs[i].json_data == {"echo": i}
        assert not outputs[i].has_error


@pytest.mark.asyncio
async def test_stop_on_fail_never_attempts_remaining_items():
    handler = Recorder(fail_on={2})

    with pytest.raises(NodeApiError):
        await process_items(make_items(5), handler, continue_on_fail=False)

    assert handler.attempted == [0, 1, 2]


@pytest.mark.asyncio
async def test_credential_error_always_propagates():
    handler = Recorder(fail_on={0}, error=CredentialError("no key"))

    with pytest.raises(CredentialError):
        await process_items(make_items(3), handler, continue_on_fail=True)

    assert handler.attempted == [0]


def test_error_item_uses_class_name_for_empty_message():
    item = ErrorPolicyHandler.get_error_item(NodeOperationError(""), 4)

    assert item.json_data == {"error": "NodeOperationError"}
    assert item.paired_item == PairedItem(item=4)


@pytest.mark.parametrize(
    "error,category",
    [
        (CredentialError("missing"), ErrorCategory.CREDENTIAL_MISSING),
        (NodeApiError("denied", status_code=401), ErrorCategory.CREDENTIAL_INVALID),
        (NodeApiError("nope", status_code=404), ErrorCategory.RESOURCE_NOT_FOUND),
        (NodeApiError("slow down", status_code=429), ErrorCategory.RATE_LIMITED),
        (NodeApiError("quota_exceeded: out of credits", status_code=401), ErrorCategory.QUOTA_EXCEEDED),
        (NodeApiError("down", status_code=503), ErrorCategory.EXTERNAL_SERVICE_ERROR),
        (NodeApiError("request timed out"), ErrorCategory.TIMEOUT),
        (NodeOperationError("No binary data found in field 'data' of item 0"), ErrorCategory.VALIDATION_ERROR),
        (RuntimeError("weird"), ErrorCategory.UNKNOWN),
    ],
)
def test_error_classification(error, category):
    context = ErrorClassifier.classify(error)

    assert context.category == category
    assert context.suggestion
    assert context.to_dict()["category"] == category.value
