from flask import Blueprint, Response, abort, current_app
import json
import logging

from ..auth.guard import require_admin
from ..resources.registry import BY_TABLE

logger = logging.getLogger(__name__)

realtime_bp = require_admin(Blueprint('realtime', __name__))


def event_stream(resource, keepalive):
    """Server-Sent Events for one table; the subscription is released when the client goes away"""
    with resource.subscribe() as subscription:
        logger.info(f"Realtime stream opened for '{resource.table}'")
        yield ': connected\n\n'
        try:
            while True:
                event = subscription.get(timeout=keepalive)
                if event is None:
                    yield ': keep-alive\n\n'
                    continue
                yield f'event: change\ndata: {json.dumps(event.to_dict())}\n\n'
        finally:
            logger.info(f"Realtime stream closed for '{resource.table}'")


@realtime_bp.route('/<table>')
def stream(table):
    resource = BY_TABLE.get(table)
    if resource is None:
        abort(404, description=f'Unknown table: {table}')
    keepalive = current_app.config['REALTIME_KEEPALIVE_SECONDS']
    return Response(
        event_stream(resource, keepalive),
        mimetype='text/event-stream',
        headers={'Cache-Control': 'no-cache', 'X-Accel-Buffering': 'no'},
    )
