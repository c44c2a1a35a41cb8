import logging, sys
from app.settings import settings

def configure_logging():
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)]
    )
    if settings.EVAL_DEBUG_LOG:
        pipeline_logger = logging.getLogger("evaluation_pipeline")
        if not any(isinstance(h, logging.FileHandler) for h in pipeline_logger.handlers):
            fh = logging.FileHandler(settings.EVAL_DEBUG_LOG, mode="a", encoding="utf-8")
            fh.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(message)s"))
            pipeline_logger.addHandler(fh)
