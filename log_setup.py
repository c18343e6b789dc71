"""
日誌系統設定工具

供 run.py 和 main.py 在啟動時呼叫，設定統一的日誌格式與輸出目標。

使用方式（放在 run.py / main.py 最頂部）：
    import logging
    from log_setup import setup_logging
    setup_logging('run.log')
"""
import logging
import sys
from typing import Optional

LOG_FORMAT = '%(asctime)s [%(levelname)-5s] %(name)-25s %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def setup_logging(log_file: Optional[str], level: int = logging.INFO) -> None:
    """
    設定全域日誌系統（檔案 + 終端機雙輸出）

    Args:
        log_file: 日誌檔案路徑（如 'run.log', 'main.log'）；None 表示只輸出到終端機
        level:    日誌等級（預設 INFO）
    """
    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.insert(0, logging.FileHandler(log_file, encoding='utf-8', mode='w'))

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
        handlers=handlers,
        force=True,
    )

    # 抑制第三方套件的冗余日誌
    for noisy in ('urllib3', 'requests', 'werkzeug', 'charset_normalizer'):
        logging.getLogger(noisy).setLevel(logging.WARNING)
