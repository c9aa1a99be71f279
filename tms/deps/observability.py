from fastapi import Request

from tms.core.logging import OperationLogger, operation_logger


def request_logger(operation: str):
    def dependency(request: Request) -> OperationLogger:
        return operation_logger(
            f"tms.{operation}",
            operation,
            request_id=getattr(request.state, "request_id", None),
        )

    return dependency
