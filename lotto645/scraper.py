"""
Lotto 6/45 Historical Data Fetcher

Pulls draw results one draw at a time from the public dhlottery JSON
endpoint, starting after the last cached draw, until the endpoint reports
that no further draw exists. Results are cached to CSV.
"""
import logging

import requests

from lotto645.config import CSV_PATH
from lotto645.errors import HistoryFetchError, InvalidDrawRecord
from lotto645.history import DrawRecord, load_history, save_history

logger = logging.getLogger(__name__)

API_URL = "https://www.dhlottery.co.kr/common.do"
HEADERS = {
    "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36",
    "Accept": "application/json, text/plain, */*",
}


def parse_draw(payload):
    """
    Convert one endpoint payload into a DrawRecord.

    Returns None when the endpoint signals there is no such draw
    (returnValue == "fail" or a missing drwNo).
    """
    if payload.get("returnValue") != "success" or payload.get("drwNo") is None:
        return None
    numbers = [payload.get(f"drwtNo{i}") for i in range(1, 7)]
    if any(n is None for n in numbers) or payload.get("bnusNo") is None:
        raise InvalidDrawRecord(f"Incomplete payload for draw {payload.get('drwNo')}")
    return DrawRecord(
        draw_index=int(payload["drwNo"]),
        main_numbers=frozenset(int(n) for n in numbers),
        bonus_number=int(payload["bnusNo"]),
        date=payload.get("drwNoDate"),
    )


def fetch_draw(draw_no, session=None, timeout=15):
    """Fetch a single draw. Returns a DrawRecord, or None past the latest draw."""
    session = session or requests.Session()
    try:
        resp = session.get(
            API_URL,
            params={"method": "getLottoNumber", "drwNo": draw_no},
            headers=HEADERS,
            timeout=timeout,
        )
        resp.raise_for_status()
        payload = resp.json()
    except (requests.RequestException, ValueError) as e:
        raise HistoryFetchError(f"Failed to fetch draw {draw_no}: {e}") from e
    return parse_draw(payload)


def fetch_draws(start=1, session=None, limit=None):
    """
    Fetch consecutive draws from `start` until the endpoint runs out.

    `limit` caps the number of draws fetched in one call.
    """
    session = session or requests.Session()
    records = []
    draw_no = start
    while limit is None or len(records) < limit:
        try:
            record = fetch_draw(draw_no, session=session)
        except HistoryFetchError as e:
            e.fetched = tuple(records)
            raise
        if record is None:
            break
        records.append(record)
        if draw_no % 100 == 0:
            logger.info("[Scraper] ... fetched through draw %d", draw_no)
        draw_no += 1
    logger.info("[Scraper] Fetched %d new draws starting at %d", len(records), start)
    return records


def update_history(path=CSV_PATH, session=None):
    """
    Bring the cached CSV up to date and return the full history.

    A fetch error keeps whatever was fetched before it and falls back to
    the cached history; with nothing cached or fetched it propagates.
    """
    history = load_history(path)
    start = history.last_draw_index + 1
    try:
        fresh = fetch_draws(start=start, session=session)
    except HistoryFetchError as e:
        if len(history) == 0 and not e.fetched:
            raise
        logger.warning("[Scraper] Fetch failed after %d new draws; using what is cached",
                       len(e.fetched), exc_info=True)
        fresh = list(e.fetched)

    if fresh:
        history = history.extend(fresh)
        save_history(history, path)
    return history
