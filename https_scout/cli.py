# === FILE: https_scout/cli.py ===
#!/usr/bin/env python3
"""
Точка входа для запуска HttpsScout через командную строку.

Сайты обходятся рекурсивно. Каждая http:// ссылка проверяется: можно ли
заменить её на https://. Если можно, в stdout пишется строка
``<страница> <ссылка>``. Ошибки пишутся в stderr.

Команды:
  crawl     Обойти сайты и вывести ссылки, которые можно перевести на HTTPS
  config    Показать итоговую конфигурацию

Общие опции:
  --config PATH       Путь к YAML/JSON-конфигу (default: configs/default.yaml, если есть)
  --log-level LEVEL   Уровень логирования (DEBUG, INFO, ...)
  --log-file PATH     Дополнительный файл для логов
  --log-format FORMAT Формат строк в stderr

Команда crawl опции:
  --depth INT         Сколько уровней страниц обходить, 0 = без ограничения
  --parallel INT      Параллельных запросов на один хост (>= 1)
  --delay DURATION    Пауза между запросами к хосту (1s, 250ms, ...)
  --timeout DURATION  Таймаут одного запроса
  --verbose           Писать ход обхода в stderr
  --slack URL         Slack incoming webhook: итоги также отправляются туда

Пример:
  https_scout crawl --parallel 5 --delay 1s https://mysite.com
  ('--parallel 5 --delay 1s' означает не более 5 запросов в секунду на хост)
"""
import asyncio
import io
import logging
import sys
from pathlib import Path

import click

from https_scout import __version__
from https_scout.config import load_config
from https_scout.engine import Engine
from https_scout.logger import LOGGER_NAME, capture, init_logging
from https_scout.report.sink import LineWriter
from https_scout.report.slack import format_message
from https_scout.report.webhook import WebhookError, post_message

CONTEXT_SETTINGS = dict(help_option_names=["--help", "-h"])


def print_error(message: str):
    click.secho(message, fg='red', err=True)
    sys.exit(1)


def _resolve_config(ctx, sites, **overrides):
    try:
        return load_config(ctx.obj['config_path'], sites=list(sites) or None, **overrides)
    except (ValueError, TypeError, FileNotFoundError) as e:
        print_error(f'invalid configuration: {e}')


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='HttpsScout, version %(version)s')
@click.option(
    '--config', '-c', 'config_path',
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Путь к файлу конфигурации YAML/JSON.'
)
@click.option(
    '--log-level', 'log_level',
    default='INFO', show_default=True,
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']),
    help='Уровень логирования'
)
@click.option(
    '--log-file', 'log_file',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Путь к файлу логов (только stderr, если не указан)'
)
@click.option(
    '--log-format', 'log_format',
    default='%(message)s',
    show_default=True,
    help='Строка формата для логов в stderr'
)
@click.pass_context
def cli(ctx, config_path, log_level, log_file, log_format):
    """Find links you can update to HTTPS."""
    init_logging(
        level=log_level,
        log_file=str(log_file) if log_file else None,
        log_format=log_format
    )
    ctx.ensure_object(dict)
    ctx.obj['config_path'] = config_path


@cli.command('crawl', context_settings=CONTEXT_SETTINGS)
@click.argument('sites', nargs=-1)
@click.option('--depth', type=int, default=None,
              help='Сколько уровней страниц обходить (>= 1), 0 = без ограничения.')
@click.option('--parallel', type=int, default=None,
              help='Параллельных запросов на один хост, значение >= 1.')
@click.option('--delay', default=None, help='Пауза между запросами к одному хосту (1s, 250ms).')
@click.option('--timeout', default=None, help='Таймаут одного запроса (10s).')
@click.option('--user-agent', 'user_agent', default=None, help='Заголовок User-Agent.')
@click.option('--retry-times', 'retry_times', type=int, default=None,
              help='Повторы при 429/5xx и сетевых ошибках.')
@click.option('--verbose', is_flag=True, help='Писать ход обхода в stderr.')
@click.option('--slack', 'slack_url', default=None,
              help='Slack incoming webhook. Если задан, итоги также отправляются в Slack.')
@click.pass_context
def crawl(ctx, sites, depth, parallel, delay, timeout, user_agent, retry_times, verbose, slack_url):
    """Обойти SITES и вывести http:// ссылки, доступные по HTTPS."""
    cfg = _resolve_config(
        ctx, sites,
        depth=depth,
        parallel=parallel,
        delay=delay,
        timeout=timeout,
        user_agent=user_agent,
        retry_times=retry_times,
        verbose=verbose or None,
        slack_url=slack_url,
    )
    log = logging.getLogger(LOGGER_NAME)

    results_buf = io.StringIO()
    errors_buf = io.StringIO()
    streams = [sys.stdout]
    handler = None
    if cfg.slack_url:
        streams.append(results_buf)
        handler = capture(log, errors_buf)

    try:
        Engine(cfg).run(LineWriter(*streams), log)
    except ValueError as e:
        print_error(f'failed to crawl: {e}')
    finally:
        if handler is not None:
            log.removeHandler(handler)

    if not cfg.slack_url:
        return

    msg = format_message(results_buf.getvalue(), errors_buf.getvalue())
    try:
        asyncio.run(post_message(cfg.slack_url, msg))
    except WebhookError as e:
        log.error('failed posting to Slack: %s', e)
        sys.exit(1)


@cli.command('config', context_settings=CONTEXT_SETTINGS)
@click.argument('sites', nargs=-1)
@click.pass_context
def show_config(ctx, sites):
    """Показать итоговую конфигурацию в JSON."""
    cfg = _resolve_config(ctx, sites)
    click.echo(cfg.model_dump_json(indent=2))


if __name__ == "__main__":
    cli()
