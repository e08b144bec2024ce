from contextlib import contextmanager
from datetime import date, datetime, time, timedelta
from pathlib import Path
from typing import Any, Callable, Dict, Generator, Optional

from loguru import logger


@contextmanager
def log_exceptions(msg: str, continue_on_error: bool = True) -> Generator[None, None, None]:
    """
    Context-Manager für das Logging von Ausnahmen.
    Loggt eine Fehlermeldung und entscheidet, ob die Exception weitergereicht wird.

    Args:
        msg (str): Nachricht für das Logging im Fehlerfall.
        continue_on_error (bool): Bei False wird die Exception erneut ausgelöst, ansonsten nur geloggt.

    Beispiel:
        with log_exceptions("Alte Sicherungen konnten nicht gelöscht werden"):
            prune()
    """
    try:
        yield
    except Exception as e:
        logger.error(f"{msg}: {e}")
        if not continue_on_error:
            raise


# Datumsformate für freie Texteingaben
DATE_FORMATS: tuple[str, ...] = ("%Y-%m-%d", "%d.%m.%Y", "%d.%m.%y", "%Y/%m/%d")

# Excel zählt Tage ab dem 30.12.1899 (Windows-Epoche)
EXCEL_EPOCH = date(1899, 12, 30)

def _parse_float_str(s: str) -> Optional[float]:
    s = s.strip().replace("’", "").replace("'", "").replace(" ", "").replace(",", ".")
    try:
        return float(s)
    except ValueError:
        return None

def _parse_date_str(s: str) -> Optional[date]:
    s = s.strip()
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(s, fmt).date()
        except ValueError:
            continue
    return None

def _serial_to_date(v: float) -> Optional[date]:
    try:
        return EXCEL_EPOCH + timedelta(days=int(v))
    except OverflowError:
        return None

_FLOAT_CONVERTERS: Dict[type, Callable[[Any], Optional[float]]] = {
    type(None): lambda _v: None,
    int: lambda v: float(v),
    float: lambda v: float(v),
    str: _parse_float_str,
    # Zeitwerte als Tagesbruchteil, wie Excel sie speichert
    time: lambda v: (v.hour * 3600 + v.minute * 60 + v.second + v.microsecond / 1e6) / 86400,
    timedelta: lambda v: v.total_seconds() / 86400,
}

_DATE_CONVERTERS: Dict[type, Callable[[Any], Optional[date]]] = {
    datetime: lambda v: v.date(),
    date: lambda v: v,
    str: _parse_date_str,
    int: _serial_to_date,
    float: _serial_to_date,
    type(None): lambda _v: None,
}

def to_float(v: Any) -> Optional[float]:
    """Typbasierte Zahl-Konvertierung (None/str/int/float/time/timedelta -> float|None)."""
    conv = _FLOAT_CONVERTERS.get(type(v))
    return conv(v) if conv else None

def to_date(v: Any) -> Optional[date]:
    """Typbasierte Datums-Konvertierung (None/str/date/datetime/Excel-Seriennummer -> date|None)."""
    conv = _DATE_CONVERTERS.get(type(v))
    return conv(v) if conv else None

def ensure_dir(path: Path) -> Path:
    """Erzeugt ein Verzeichnis (rekursiv), falls es fehlt, und gibt den Pfad zurück."""
    path.mkdir(parents=True, exist_ok=True)
    return path
