# === FILE: sitemap_builder/cli.py ===
#!/usr/bin/env python3
"""
Точка входа для генератора карты сайта через командную строку.

Команды:
  build     Собрать записи карты сайта и вывести/сохранить JSON
  check     Сверить колонки источников со схемой БД
  config    Показать текущую конфигурацию

Общие опции:
  --config PATH       Путь к YAML/JSON-конфигу (default: configs/sitemap.yaml)
  --log-level LEVEL   Уровень логирования (DEBUG, INFO, ...)
  --log-file PATH     Файл для логов (stderr, если не указан)
  --log-format FORMAT Формат логирования

Команда build опции:
  --json PATH               Сохранить JSON-отчёт в файл
  --pretty                  Преформатировать JSON-вывод (отступ 2)
  --parallel/--sequential   Опрашивать таблицы параллельно (override parallel)

Дополнительно:
  --version, -v       Показать версию

Пример:
  sitemap-builder --config configs/sitemap.yaml build --json reports/sitemap.json
"""
import sys
from pathlib import Path

import click
from sqlalchemy.exc import SQLAlchemyError

from sitemap_builder import __version__
from sitemap_builder.config import load_config
from sitemap_builder.engine import Engine
from sitemap_builder.errors import ConfigurationError, SourceUnavailable
from sitemap_builder.logger import init_logging
from sitemap_builder.report.json_report import render_json

CONTEXT_SETTINGS = dict(help_option_names=["--help", "-h"])


def print_error(message: str):
    click.secho(message, fg='red', err=True)
    sys.exit(1)


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='sitemap-builder, version %(version)s')
@click.option(
    '--config', '-c', 'config_path',
    default='configs/sitemap.yaml',
    show_default=True,
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
    help='Путь к файлу логов (stderr, если не указан)'
)
@click.option(
    '--log-format', 'log_format',
    default='%(asctime)s %(levelname)s %(message)s',
    show_default=True,
    help='Строка формата для логов'
)
@click.pass_context
def cli(ctx, config_path, log_level, log_file, log_format):
    """Генератор записей карты сайта."""
    init_logging(
        level=log_level,
        log_file=str(log_file) if log_file else None,
        log_format=log_format
    )
    try:
        cfg = load_config(config_path)
    except (OSError, ValueError, TypeError) as e:
        print_error(f'Ошибка загрузки конфигурации: {e}')
    ctx.ensure_object(dict)
    ctx.obj['config'] = cfg


@cli.command('build', context_settings=CONTEXT_SETTINGS)
@click.option(
    '--json', '-j', 'json_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Сохранить JSON-отчёт в файл'
)
@click.option(
    '--pretty', is_flag=True,
    help='Преформатировать JSON-вывод (отступ 2)'
)
@click.option(
    '--parallel/--sequential', 'parallel',
    default=None,
    help='Опрашивать таблицы параллельно (по умолчанию из конфига)'
)
@click.pass_context
def build(ctx, json_output, pretty, parallel):
    """Собрать записи карты сайта."""
    cfg = ctx.obj['config']
    click.echo(f'Building sitemap for: {cfg.site_url}', err=True)
    try:
        with Engine(cfg) as engine:
            result = engine.run(parallel=parallel)
    except Exception as e:
        print_error(f'Ошибка при сборке: {e}')

    if json_output:
        try:
            saved_json = render_json(result, json_output, pretty=pretty)
            click.echo(f'JSON report: {saved_json}', err=True)
        except OSError as e:
            print_error(f'Ошибка при сохранении JSON: {e}')
    else:
        click.echo(result.json(pretty=pretty))

    if result.diagnostics.aborted:
        print_error('Сборка прервана: ошибка конфигурации')
    click.echo(
        f'{len(result.entries)} entries, {len(result.diagnostics)} diagnostics',
        err=True
    )


@cli.command('check', context_settings=CONTEXT_SETTINGS)
@click.pass_context
def check(ctx):
    """Проверить, что таблицы и колонки из конфига существуют."""
    cfg = ctx.obj['config']
    try:
        with Engine(cfg) as engine:
            engine.validate_schema()
    except ConfigurationError as e:
        print_error(f'Схема не совпадает с конфигурацией: {e}')
    except (SourceUnavailable, SQLAlchemyError) as e:
        print_error(f'База данных недоступна: {e}')
    active = [s.label for s in cfg.sources if s.active]
    click.echo(f'OK: {len(active)} active source(s)')
    for label in active:
        click.echo(f'  - {label}')


@cli.command('config', context_settings=CONTEXT_SETTINGS)
@click.pass_context
def show_config(ctx):
    """Показать текущую конфигурацию в JSON."""
    cfg = ctx.obj['config']
    click.echo(cfg.model_dump_json(indent=2))


if __name__ == "__main__":
    cli()
