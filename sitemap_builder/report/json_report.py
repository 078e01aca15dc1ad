# sitemap_builder/report/json_report.py

"""
Генерация JSON-отчёта для sitemap_builder.

Сериализация объекта AggregationResult в файл.
"""
import json
from pathlib import Path

from sitemap_builder.aggregator import AggregationResult


def render_json(result: AggregationResult, output_path: Path | str, *, pretty: bool = True) -> Path:
    """
    Сохраняет записи и диагностику в формате JSON по указанному пути.

    :param result: объект AggregationResult
    :param output_path: путь к JSON-файлу
    :param pretty: отступ 2 пробела
    :return: Path сохранённого файла

    Пример:
    ```python
    from sitemap_builder.report.json_report import render_json
    report_path = render_json(result, 'reports/sitemap.json')
    print(f"JSON report saved to: {report_path}")
    ```
    """
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)

    with output.open('w', encoding='utf-8') as f:
        json.dump(result.to_dict(), f, ensure_ascii=False, indent=2 if pretty else None)

    return output
