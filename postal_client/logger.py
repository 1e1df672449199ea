import logging
from functools import partial

import structlog
import ujson
from structlog.typing import Processor


QUIET_LOGGERS = ("urllib3", "urllib3_future", "niquests")


def setup_logger(log_level: int, console_render: bool) -> None:
    """Route structlog and stdlib logging through one formatter on stderr.

    The library never calls this; applications and the ``postal`` CLI opt in.
    """
    shared_processors: list[Processor] = [
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.ExtraAdder(),
    ]
    if not console_render:
        shared_processors.append(structlog.processors.dict_tracebacks)

    structlog.configure(
        processors=[*shared_processors, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            get_logs_renderer(console_render=console_render),
        ],
    )
    handler = logging.StreamHandler()
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.addHandler(handler)
    root_logger.setLevel(log_level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.ERROR)


def get_logs_renderer(console_render: bool) -> Processor:
    if console_render:
        # Frame locals hold request headers, the API key among them.
        return structlog.dev.ConsoleRenderer(
            colors=True,
            exception_formatter=structlog.dev.RichTracebackFormatter(show_locals=False),
        )

    return structlog.processors.JSONRenderer(serializer=partial(ujson.dumps, ensure_ascii=False))
