"""Process-wide exception log for the API server and the RPC tier.

Each process writes JSON exception records, with stack traces and caller
context, to its own ``error_{timestamp}_{pid}.log`` file.
"""

import json
import os
import threading
import traceback
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

DEFAULT_LOG_DIR = Path.home() / ".apitools" / "logs"


class ExceptionLogger:
    """Singleton exception log file writer."""

    _instance: Optional["ExceptionLogger"] = None

    def __init__(self, log_file_path: Path, mode: str):
        self.log_file_path = log_file_path
        self.mode = mode
        self._write_lock = threading.Lock()

    @classmethod
    def initialize(
        cls, log_dir: Optional[Path] = None, mode: str = "server"
    ) -> "ExceptionLogger":
        """Initialize the process exception logger (idempotent).

        Tests that need a fresh instance must reset ``cls._instance``.

        Args:
            log_dir: Directory for log files (default ~/.apitools/logs)
            mode: "server", "rpc" or "cli"; recorded in every entry
        """
        if cls._instance is not None:
            return cls._instance

        log_dir = Path(log_dir) if log_dir else DEFAULT_LOG_DIR
        log_dir.mkdir(parents=True, exist_ok=True)

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_file_path = log_dir / f"error_{timestamp}_{os.getpid()}.log"
        log_file_path.touch()

        cls._instance = cls(log_file_path, mode)
        return cls._instance

    @classmethod
    def get_instance(cls) -> Optional["ExceptionLogger"]:
        return cls._instance

    def log_exception(
        self,
        exception: BaseException,
        thread_name: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Append one exception record to the log file."""
        log_entry = {
            "timestamp": datetime.now().isoformat(),
            "mode": self.mode,
            "thread": thread_name or threading.current_thread().name,
            "exception_type": type(exception).__name__,
            "exception_message": str(exception),
            "stack_trace": "".join(
                traceback.format_exception(
                    type(exception), exception, exception.__traceback__
                )
            ),
            "context": context or {},
        }

        with self._write_lock:
            with open(self.log_file_path, "a") as f:
                f.write(json.dumps(log_entry, indent=2, default=str))
                f.write("\n---\n")

    def install_thread_exception_hook(self) -> None:
        """Route uncaught thread exceptions (rpyc workers, SMTP calls) here."""

        def global_thread_exception_handler(args):
            self.log_exception(
                exception=args.exc_value,
                thread_name=args.thread.name if args.thread else None,
                context={"exc_type": args.exc_type.__name__},
            )

        threading.excepthook = global_thread_exception_handler


def log_exception(
    exception: BaseException, context: Optional[Dict[str, Any]] = None
) -> None:
    """Log to the process exception logger if one was initialized."""
    instance = ExceptionLogger.get_instance()
    if instance is not None:
        instance.log_exception(exception, context=context)
