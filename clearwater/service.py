# clearwater/service.py: ZIP -> systems -> report, with caching
import logging
import re
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import Callable, Mapping

from clearwater.cache import TTLCache
from clearwater.codes import US_STATES, default_contaminants
from clearwater.config import Settings, get_settings
from clearwater.errors import InvalidPwsidError, InvalidStateError, InvalidZipError
from clearwater.fetch import EnvirofactsClient
from clearwater.grading import compute_grade
from clearwater.models import Contaminant, Grade, Location, Report, WaterSystem
from clearwater.normalize import build_date_map, normalize_sample, normalize_system, normalize_violation

logger = logging.getLogger(__name__)

ZIP_RE = re.compile(r"[0-9]{5}")  # ASCII only; \d also matches other scripts' digits
PWSID_RE = re.compile(r"[A-Z0-9]{3,14}")

# ----------------------- Validation -----------------------

def looks_like_zip(s: str | None) -> bool:
    return bool(ZIP_RE.fullmatch((s or "").strip()))


def looks_like_pwsid(s: str | None) -> bool:
    return bool(PWSID_RE.fullmatch((s or "").strip().upper()))


def clean_zip(s: str | None) -> str:
    z = (s or "").strip()
    if not ZIP_RE.fullmatch(z):
        raise InvalidZipError(z)
    return z


def clean_pwsid(s: str | None) -> str:
    pid = (s or "").strip().upper()
    if not PWSID_RE.fullmatch(pid):
        raise InvalidPwsidError(pid)
    return pid


def clean_state(s: str | None) -> str:
    sc = (s or "").strip().upper()
    if sc not in US_STATES:
        raise InvalidStateError(sc)
    return sc

# ----------------------- Ranking -----------------------

def rank_systems(systems: list[WaterSystem], limit: int, require_population: bool = False) -> list[WaterSystem]:
    """Drop blank/duplicate pwsids (first wins), sort by population desc, cap at ``limit``."""
    seen = set()
    unique = []
    for s in systems:
        if not s.pwsid or s.pwsid in seen:
            continue
        if require_population and s.population <= 0:
            continue
        seen.add(s.pwsid)
        unique.append(s)
    unique.sort(key=lambda s: s.population, reverse=True)
    return unique[:limit]

# ----------------------- Service -----------------------

class WaterQualityService:
    """Report assembler.  Build one per process and share it.

    All upstream access goes through ``client``; all memoization through
    ``cache`` (keys ``zip:``, ``systems:``, ``state:``, ``report:``).
    """

    def __init__(self, client: EnvirofactsClient | None = None, cache: TTLCache | None = None,
                 settings: Settings | None = None,
                 contaminants: Mapping[str, Contaminant] | None = None,
                 clock: Callable[[], datetime] = datetime.now):
        self.settings = settings or get_settings()
        self.client = client or EnvirofactsClient(self.settings)
        self.cache = cache or TTLCache(ttl=self.settings.cache_ttl_seconds,
                                       max_entries=self.settings.cache_max_entries)
        self.contaminants = contaminants if contaminants is not None else default_contaminants()
        self.clock = clock

    # ---- geocode ----

    def lookup_zip(self, zip_code: str) -> Location | None:
        z = clean_zip(zip_code)
        key = f"zip:{z}"
        cached = self.cache.get(key)
        if cached is not None:
            return cached
        location = self.client.zip_to_city(z)
        if location is not None:
            self.cache.set(key, location)
        return location

    # ---- system search ----

    def systems_for_zip(self, zip_code: str) -> list[WaterSystem]:
        """Active systems in the ZIP's city, largest first.  [] when nothing is found."""
        z = clean_zip(zip_code)
        key = f"systems:{z}"
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug("[cache hit] %s", key)
            return list(cached)

        location = self.lookup_zip(z)
        if location is None:
            return []
        logger.info("[systems] ZIP %s -> %s, %s", z, location.city, location.state)

        rows = self.client.systems_in_city(location.city, location.state)
        if not rows:
            rows = self.client.systems_in_city(location.city, location.state, state_col="state_code")
        if not rows:
            everywhere = self.client.systems_named_city(location.city) or []
            rows = [r for r in everywhere if normalize_system(r).state.upper() == location.state]

        systems = rank_systems([normalize_system(r) for r in rows or []], self.settings.max_systems)
        self.cache.set(key, tuple(systems))
        return systems

    def top_system_for_zip(self, zip_code: str) -> WaterSystem | None:
        systems = self.systems_for_zip(zip_code)
        return systems[0] if systems else None

    def systems_for_state(self, state: str) -> list[WaterSystem]:
        """Community water systems in a state with a known population, largest first."""
        sc = clean_state(state)
        key = f"state:{sc}"
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug("[cache hit] %s", key)
            return list(cached)

        logger.info("[state] Fetching systems for %s", sc)
        rows = self.client.systems_in_state(sc) or []
        systems = rank_systems([normalize_system(r) for r in rows], self.settings.max_state_systems,
                               require_population=True)
        self.cache.set(key, tuple(systems))
        return systems

    # ---- report ----

    def _fetch_facets(self, pwsid: str) -> dict[str, list[dict]]:
        """Fetch the four per-system tables concurrently; a failed facet is []."""
        jobs = {
            "violations": self.client.violations,
            "sample_results": self.client.lcr_sample_results,
            "samples": self.client.lcr_samples,
            "system": self.client.system_detail,
        }
        with ThreadPoolExecutor(max_workers=len(jobs), thread_name_prefix="facet") as pool:
            futures = {name: pool.submit(fn, pwsid) for name, fn in jobs.items()}
        out = {}
        for name, fut in futures.items():
            try:
                out[name] = fut.result() or []
            except Exception as e:
                logger.warning("[report] %s facet failed for %s: %s", name, pwsid, e)
                out[name] = []
        return out

    def report(self, pwsid: str) -> Report:
        pid = clean_pwsid(pwsid)
        key = f"report:{pid}"
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug("[cache hit] %s", key)
            return cached

        logger.info("[report] Fetching %s", pid)
        facets = self._fetch_facets(pid)

        date_map = build_date_map(facets["samples"])
        violations = tuple(normalize_violation(v, self.contaminants) for v in facets["violations"])
        samples = tuple(normalize_sample(s, date_map) for s in facets["sample_results"])
        system = normalize_system(facets["system"][0]) if facets["system"] else None

        logger.info("[report] %s: %d violations, %d samples", pid, len(violations), len(samples))
        result = Report(pwsid=pid, system=system, violations=violations, samples=samples)
        self.cache.set(key, result)
        return result

    def grade(self, report: Report) -> Grade:
        return compute_grade(report.violations, self.clock())

    def report_json(self, pwsid: str) -> dict:
        """JSON-ready report including the grade, as served to the browser client."""
        r = self.report(pwsid)
        return r.to_dict(self.grade(r))
