import logging
from typing import Awaitable, Callable, List, Sequence

from fuse_elevenlabs.workflows.engine.definitions import WorkflowItem
from fuse_elevenlabs.workflows.engine.error_handler import (
    ErrorClassifier,
    ErrorPolicyHandler,
)

logger = logging.getLogger(__name__)

ItemHandler = Callable[[WorkflowItem, int], Awaitable[WorkflowItem]]


async def process_items(
    items: Sequence[WorkflowItem],
    handler: ItemHandler,
    continue_on_fail: bool = False,
) -> List[WorkflowItem]:
    """
    Run `handler` once per input item, strictly in order.

    Each handler call is awaited before the next item starts. When a handler
    raises and `continue_on_fail` is set, the failure becomes an
    `{"error": message}` item paired with the failing index and processing
    moves on; otherwise the error propagates and the remaining items are
    never attempted.
    """
    output_items: List[WorkflowItem] = []

    for index, item in enumerate(items):
        try:
            result = await handler(item, index)
        except Exception as e:
            error_context = ErrorClassifier.classify(e)

            if not ErrorPolicyHandler.should_continue(e, continue_on_fail):
                logger.error(
                    f"Item {index} failed ({error_context.category.value}): {e}. "
                    f"Stopping after {len(output_items)} item(s)."
                )
                raise

            logger.warning(
                f"Item {index} failed ({error_context.category.value}): {e}. Continuing."
            )
            output_items.append(ErrorPolicyHandler.get_error_item(e, index))
            continue

        output_items.append(result)

    logger.debug(f"Processed {len(output_items)} item(s)")
    return output_items
