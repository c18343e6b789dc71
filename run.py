"""
TWMonitor 終端機入口點 (CLI)

Usage:
    python run.py              # 持續輪詢，每輪輸出報價表
    python run.py --once       # 只執行一輪
    python run.py --interval 10 --log-file run.log

處理流程與 main.py (API) 完全一致，只是把結果印在終端機。
"""
import argparse
import logging
import sys

import pandas as pd

from core import (
    RefreshLoop, create_refresh_loop, store_to_frame, to_taipei,
    REFRESH_INTERVAL_SECONDS,
)
from log_setup import setup_logging

logger = logging.getLogger('run')


def format_snapshot(loop: RefreshLoop) -> str:
    """
    將目前快照整理成文字報表

    Returns:
        str: 狀態列 + 報價表 + 進場訊號
    """
    snapshot = loop.snapshot
    lines = []

    if loop.error:
        lines.append(f'[ERROR] {loop.error}')

    status = snapshot.status
    if status is None:
        lines.append('狀態: 載入中...')
    else:
        checked = to_taipei(status.checked_at).strftime('%Y-%m-%d %H:%M:%S')
        lines.append(
            f'狀態: {status.state}  開盤: {"是" if status.market_open else "否"}  '
            f'累積: {status.cumulative_drop:.2f} 點  ({checked})'
        )

    with pd.option_context('display.float_format', '{:,.2f}'.format,
                           'display.unicode.east_asian_width', True):
        lines.append(store_to_frame(snapshot.quotes).to_string())

    if snapshot.signals:
        lines.append('進場機會:')
        for signal in snapshot.signals:
            if not isinstance(signal, dict):
                continue
            targets = signal.get('applicableTo') or []
            if not isinstance(targets, (list, tuple)):
                targets = [targets]
            applicable = ', '.join(str(t) for t in targets)
            lines.append(f"  - [{signal.get('indicator')}] {signal.get('title')} ({signal.get('value')})")
            if applicable:
                lines.append(f'    適用標的: {applicable}')
    elif status is not None:
        lines.append('目前市場穩定，無明確的長線進場訊號。')

    return '\n'.join(lines)


def print_snapshot(loop: RefreshLoop) -> None:
    print(format_snapshot(loop))
    print('-' * 60)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description='TWMonitor 台股即時監控')
    parser.add_argument('--once', action='store_true', help='只執行一輪後結束')
    parser.add_argument('--interval', type=float, default=REFRESH_INTERVAL_SECONDS,
                        help=f'輪詢間隔秒數（預設 {REFRESH_INTERVAL_SECONDS}）')
    parser.add_argument('--log-file', default=None, help='日誌檔案路徑')
    args = parser.parse_args(argv)

    setup_logging(args.log_file)

    loop = create_refresh_loop(interval=args.interval)

    if args.once:
        ok = loop.run_once()
        print_snapshot(loop)
        return 0 if ok else 1

    loop.add_listener(print_snapshot)
    loop.start()
    try:
        while loop.running:
            loop.join(0.5)
    except KeyboardInterrupt:
        logger.info('收到中斷訊號，停止輪詢...')
    finally:
        loop.stop()
    return 0


if __name__ == '__main__':
    sys.exit(main())
