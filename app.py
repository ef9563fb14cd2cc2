from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path

from flask import Flask, Response, current_app, jsonify, request, send_from_directory

from settings import Settings, load_settings, setup_logging
from solar_api import HistoricalQuery, SolarApiClient, SolarApiError
from solar_monthly.charts import CHART_TYPES, build_monthly_chart
from solar_monthly.conversion import cumulative_to_monthly
from solar_monthly.export import export_filename, monthly_to_csv, monthly_to_xlsx
from solar_monthly.models import MonthlyReading, format_month_timestamp
from solar_monthly.reporting import GenerationReport, build_generation_report

APP_ROOT = Path(__file__).resolve().parent
XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

logger = logging.getLogger(__name__)

settings = load_settings()
setup_logging("solar-dashboard", "DEBUG" if settings.debug else None)

app = Flask(__name__, static_folder=None)
app.config["SOLAR_SETTINGS"] = settings
app.config["SOLAR_CLIENT"] = SolarApiClient(settings)


@app.get("/")
def index() -> object:
    return send_from_directory(APP_ROOT, "index.html")


@app.get("/styles.css")
def styles() -> object:
    return send_from_directory(APP_ROOT, "styles.css")


@app.get("/api/health")
def health() -> object:
    return jsonify(
        {
            "status": "Server is running",
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
    )


@app.post("/api/solar/login")
def login() -> object:
    body = _json_body()
    session = _client().login(body.get("user_account"), body.get("user_password"))
    return jsonify(
        {
            "token": session.token,
            "user_name": session.user_name,
            "email": session.email,
        }
    )


@app.post("/api/solar/historical-data")
def historical_data() -> object:
    body = _json_body()
    required = ["token", "ps_key_list", "data_point", "start_time", "end_time"]
    # Blank strings count as missing.
    body = {key: value.strip() if isinstance(value, str) else value for key, value in body.items()}
    if any(not body.get(name) for name in required):
        return jsonify({"error": "Missing required parameters", "required": required}), 400

    ps_key_list = body["ps_key_list"]
    if not isinstance(ps_key_list, list):
        ps_key_list = [ps_key_list]
    data = _client().historical_data(
        body["token"],
        [str(key) for key in ps_key_list],
        str(body["data_point"]),
        str(body["start_time"]),
        str(body["end_time"]),
        data_type=str(body.get("data_type", "2")),
        query_type=str(body.get("query_type", "1")),
        order=str(body.get("order", "0")),
    )
    return jsonify(data)


@app.post("/api/monthly")
def monthly() -> object:
    try:
        query = _parse_query()
        chart_type = _parse_choice("chart_type", CHART_TYPES, default="bar")
    except ValueError as exc:
        return jsonify({"error": str(exc)}), 400

    readings = _fetch_monthly(query)
    report = build_generation_report(readings)
    chart = build_monthly_chart(readings, chart_type)
    return jsonify(
        {
            "summary": _build_summary(report),
            "monthly": _format_monthly(readings),
            "yearly": _format_yearly(report),
            "chart": json.loads(chart.to_json()),
        }
    )


@app.post("/api/monthly/export")
def export() -> object:
    try:
        query = _parse_query()
        export_format = _parse_choice("format", ("csv", "xlsx"), default="csv")
    except ValueError as exc:
        return jsonify({"error": str(exc)}), 400

    readings = _fetch_monthly(query)
    filename = export_filename(export_format)
    if export_format == "xlsx":
        body: str | bytes = monthly_to_xlsx(readings)
        mimetype = XLSX_MIMETYPE
    else:
        body = monthly_to_csv(readings)
        mimetype = "text/csv"
    return Response(
        body,
        mimetype=mimetype,
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


@app.errorhandler(SolarApiError)
def handle_solar_error(exc: SolarApiError) -> object:
    logger.warning("%s %s: %s", request.method, request.path, exc)
    return jsonify({"error": exc.user_message()}), exc.status_code


def _client() -> SolarApiClient:
    return current_app.config["SOLAR_CLIENT"]


def _json_body() -> dict:
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        return {}
    return body


def _fetch_monthly(query: HistoricalQuery) -> list[MonthlyReading]:
    token = request.form.get("token", "").strip()
    series = _client().fetch_cumulative_series(token, query)
    return cumulative_to_monthly(series.readings)


def _parse_query() -> HistoricalQuery:
    settings: Settings = current_app.config["SOLAR_SETTINGS"]
    ps_key = request.form.get("ps_key", "").strip() or settings.default_ps_key
    if not ps_key:
        raise ValueError("Device key (ps_key) is required.")
    data_point = request.form.get("data_point", "").strip() or settings.default_data_point

    start_year = _parse_int_field("start_year", minimum=2000, maximum=2100)
    start_month = _parse_int_field("start_month", minimum=1, maximum=12)
    end_year = _parse_int_field("end_year", minimum=2000, maximum=2100)
    end_month = _parse_int_field("end_month", minimum=1, maximum=12)
    if (end_year, end_month) < (start_year, start_month):
        raise ValueError("End month must not be before start month.")

    return HistoricalQuery(
        ps_key=ps_key,
        data_point=data_point,
        start_time=format_month_timestamp(start_year, start_month),
        end_time=format_month_timestamp(end_year, end_month),
        data_type=request.form.get("data_type", "").strip() or "2",
        query_type=request.form.get("query_type", "").strip() or "2",
        order=request.form.get("order", "").strip() or "0",
    )


def _parse_int_field(name: str, *, minimum: int | None = None, maximum: int | None = None) -> int:
    raw = request.form.get(name, "").strip()
    if not raw:
        raise ValueError(f"Value for {name.replace('_', ' ')} is required.")
    try:
        value = int(raw)
    except ValueError as exc:
        raise ValueError(f"Value for {name.replace('_', ' ')} is invalid.") from exc
    if minimum is not None and value < minimum:
        raise ValueError(f"Value for {name.replace('_', ' ')} must be at least {minimum}.")
    if maximum is not None and value > maximum:
        raise ValueError(f"Value for {name.replace('_', ' ')} must be at most {maximum}.")
    return value


def _parse_choice(name: str, choices: tuple[str, ...], *, default: str) -> str:
    value = (request.form.get(name) or request.args.get(name) or "").strip().lower() or default
    if value not in choices:
        raise ValueError(f"Value for {name.replace('_', ' ')} must be one of {', '.join(choices)}.")
    return value


def _format_monthly(readings: list[MonthlyReading]) -> list[dict[str, object]]:
    return [
        {
            "time_stamp": item.timestamp,
            "year": item.year,
            "month": item.month,
            "month_name": item.month_name,
            "short_date": item.short_label,
            "cumulative_wh": item.cumulative_wh,
            "cumulative_kwh": round(item.cumulative_kwh, 2),
            "monthly_kwh": round(item.monthly_kwh, 2),
            "calculation": item.calculation,
        }
        for item in readings
    ]


def _format_yearly(report: GenerationReport) -> list[dict[str, object]]:
    return [
        {"year": year, "generation_kwh": round(value, 2)}
        for (year,), value in sorted(report.yearly_totals.items())
    ]


def _build_summary(report: GenerationReport) -> dict[str, object]:
    return {
        "count": report.count,
        "total_kwh": round(report.total_kwh, 2),
        "mean_kwh": round(report.mean_kwh, 2),
        "max_kwh": round(report.max_kwh, 2),
        "min_kwh": round(report.min_kwh, 2),
        "growth_pct": round(report.growth_pct, 1),
        "last_month_growth_pct": round(report.last_month_growth_pct, 1),
        "trend_kwh_per_month": round(report.trend_kwh_per_month, 2),
        "max_month": report.max_month,
        "min_month": report.min_month,
        "first_month": report.first_month,
        "latest_month": report.latest_month,
    }


if __name__ == "__main__":
    app.run(host=settings.host, port=settings.port, debug=settings.debug)
