import uuid, time
from flask import g, has_request_context

from zebra_printer.services.log_service import log_audit


class RequestTrace:
    def __init__(self, action: str):
        self.id = str(uuid.uuid4())
        self.action = action
        self.start = time.time()
        self.events = []

    def add(self, event: str, **meta):
        self.events.append({
            "t": time.strftime("%Y-%m-%d %H:%M:%S"),
            "event": event,
            **meta
        })

    def finish(self, status="ok"):
        self.end = time.time()
        self.status = status
        self.duration = round(self.end - self.start, 3)
        dados = {
            "trace_id": self.id,
            "action": self.action,
            "duration": self.duration,
            "status": status,
            "events": self.events
        }
        log_audit(self.action, trace=dados)
        return dados


def start_trace(action: str) -> RequestTrace:
    """
    Cria um novo trace para a requisição corrente
    """
    if has_request_context():
        g.trace = RequestTrace(action)
        return g.trace
    return RequestTrace(action)
