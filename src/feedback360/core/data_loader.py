from __future__ import annotations

import csv
import io
import logging
import time
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple, Union
from urllib.parse import urljoin

import pandas as pd
import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from feedback360.config import CSV_BASE_URL, DATA_DIR, HTTP_TIMEOUT_SECONDS

logger = logging.getLogger(__name__)

CsvSource = Union[str, Path, bytes]

_TRUE_CELLS = {"true", "yes", "1"}
_FALSE_CELLS = {"false", "no", "0"}


class DataLoaderError(Exception):
    """Raised when a survey export cannot be read, fetched or parsed."""


def _build_retry_session() -> requests.Session:
    """
    Build a requests Session with conservative retries.
    Intranet file servers can be slow or transiently flaky.
    """
    session = requests.Session()

    retry = Retry(
        total=3,
        connect=3,
        read=3,
        status=3,
        backoff_factor=0.5,
        status_forcelist=(429, 500, 502, 503, 504),
        allowed_methods=frozenset({"GET"}),
        raise_on_status=False,
    )

    adapter = HTTPAdapter(max_retries=retry, pool_connections=4, pool_maxsize=4)
    session.mount("https://", adapter)
    session.mount("http://", adapter)

    return session


_SESSION: Optional[requests.Session] = None


def _get_session() -> requests.Session:
    global _SESSION
    if _SESSION is None:
        _SESSION = _build_retry_session()
    return _SESSION


# ---------------------------------------------------------------------------
# Cell / CSV parsing
# ---------------------------------------------------------------------------

def transform_cell(value: Any) -> Any:
    """
    Export cells arrive as text. Checkbox answers become booleans, empty
    cells become None, everything else stays as written.
    """
    if value is None:
        return None
    if not isinstance(value, str):
        try:
            if pd.isna(value):
                return None
        except (TypeError, ValueError):
            pass
        return value

    lower = value.strip().lower()
    if lower == "":
        return None
    if lower in _TRUE_CELLS:
        return True
    if lower in _FALSE_CELLS:
        return False
    return value


def dedupe_headers(names: Iterable[str]) -> List[str]:
    """
    Repeated headers get a "_N" suffix ("X", "X_1", "X_2"), the way survey
    exports number duplicated questions. The suffix is what
    `remove_index_suffix` strips, so repeats still land on one collaborator.
    """
    taken: Set[str] = set()
    last_index: Dict[str, int] = {}
    out: List[str] = []
    for name in names:
        candidate = name
        if candidate in taken:
            n = last_index.get(name, 0)
            while candidate in taken:
                n += 1
                candidate = f"{name}_{n}"
            last_index[name] = n
        taken.add(candidate)
        out.append(candidate)
    return out


def _detect_delimiter(text: str) -> str:
    sample = text[:4096]
    try:
        return csv.Sniffer().sniff(sample, delimiters=",;\t").delimiter
    except csv.Error:
        return ","


def parse_feedback_csv(text: Union[str, bytes], source_name: str = "<memory>") -> List[Dict[str, Any]]:
    """
    Parse one CSV export into rows keyed by trimmed header.

    The delimiter is sniffed (exports come with "," or ";"), blank lines are
    skipped and a UTF-8 BOM is tolerated.
    """
    if isinstance(text, bytes):
        try:
            text = text.decode("utf-8-sig")
        except UnicodeDecodeError:
            logger.warning("%s is not UTF-8; decoding as latin-1", source_name)
            text = text.decode("latin-1")
    text = text.lstrip("\ufeff")

    if not text.strip():
        return []

    try:
        df = pd.read_csv(
            io.StringIO(text),
            sep=_detect_delimiter(text),
            header=None,
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
        )
    except (pd.errors.ParserError, pd.errors.EmptyDataError, ValueError) as exc:
        raise DataLoaderError(f"Could not parse CSV {source_name}: {exc}") from exc

    # Header row is taken by hand: pandas would rename repeats to "X.1".
    header_row = ["" if pd.isna(c) else str(c).strip() for c in df.iloc[0]]
    df = df.iloc[1:]
    df.columns = dedupe_headers(header_row)

    rows: List[Dict[str, Any]] = []
    for record in df.to_dict(orient="records"):
        row = {header: transform_cell(value) for header, value in record.items()}
        if all(v is None for v in row.values()):
            continue
        rows.append(row)

    logger.info("Parsed %s: %d rows, %d columns", source_name, len(rows), len(df.columns))
    return rows


# ---------------------------------------------------------------------------
# Sources
# ---------------------------------------------------------------------------

def read_csv_file(path: Union[str, Path]) -> List[Dict[str, Any]]:
    p = Path(path)
    if not p.exists():
        raise DataLoaderError(f"File not found: {p}")
    try:
        raw = p.read_bytes()
    except OSError as exc:
        raise DataLoaderError(f"Could not read {p}: {exc}") from exc
    return parse_feedback_csv(raw, source_name=p.name)


def resolve_url(name_or_url: str, base_url: Optional[str] = None) -> str:
    """Absolute URLs pass through; bare names are joined to the base URL."""
    if name_or_url.startswith(("http://", "https://")):
        return name_or_url
    base = (base_url if base_url is not None else CSV_BASE_URL).strip()
    if not base:
        raise DataLoaderError(
            f"Cannot resolve {name_or_url!r}: no base URL configured (FEEDBACK360_CSV_BASE_URL)."
        )
    if not base.endswith("/"):
        base += "/"
    return urljoin(base, name_or_url)


def fetch_csv(
    name_or_url: str,
    *,
    base_url: Optional[str] = None,
    timeout_seconds: int = HTTP_TIMEOUT_SECONDS,
    session: Optional[requests.Session] = None,
) -> List[Dict[str, Any]]:
    """Download one export over HTTP(S) and parse it."""
    url = resolve_url(name_or_url, base_url)
    sess = session or _get_session()

    try:
        resp = sess.get(url, timeout=timeout_seconds)
    except requests.RequestException as exc:
        raise DataLoaderError(f"HTTP error while fetching {url}: {exc}") from exc

    if resp.status_code != 200:
        raise DataLoaderError(f"Failed to fetch {url} (status={resp.status_code})")

    return parse_feedback_csv(resp.content, source_name=url.rsplit("/", 1)[-1] or url)


def load_feedback_sources(sources: Iterable[CsvSource], **fetch_kwargs: Any) -> List[Dict[str, Any]]:
    """
    Load several exports into one batch.

    Each source is a local path, an http(s) URL, or raw bytes (uploads).
    Rows are concatenated in source order.
    """
    all_rows: List[Dict[str, Any]] = []
    for src in sources:
        if isinstance(src, bytes):
            rows = parse_feedback_csv(src)
        elif isinstance(src, str) and src.startswith(("http://", "https://")):
            rows = fetch_csv(src, **fetch_kwargs)
        else:
            rows = read_csv_file(src)
        all_rows.extend(rows)
    return all_rows


# ---------------------------------------------------------------------------
# Data directory
# ---------------------------------------------------------------------------

def ensure_data_dir(data_dir: Optional[Path] = None) -> bool:
    """
    Check the export folder exists. Missing folder is reported, not created:
    exports are dropped there by hand.
    """
    d = Path(data_dir) if data_dir is not None else DATA_DIR
    if not d.is_dir():
        logger.warning("Data directory %s not found. Place the CSV exports there.", d)
        return False
    return True


def list_available_files(data_dir: Optional[Path] = None) -> List[str]:
    d = Path(data_dir) if data_dir is not None else DATA_DIR
    if not ensure_data_dir(d):
        return []
    return sorted(p.name for p in d.glob("*.csv") if p.is_file())


def timed_load(sources: Iterable[CsvSource], **fetch_kwargs: Any) -> Tuple[List[Dict[str, Any]], float]:
    """
    Convenience helper for UI timing logs.
    """
    t0 = time.perf_counter()
    rows = load_feedback_sources(sources, **fetch_kwargs)
    return rows, (time.perf_counter() - t0)
