import sys
from pathlib import Path

import httpx
import pytest

repo_root = Path(__file__).resolve().parent.parent
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))

from seacontext import Cfg, ContextResolver, FeedClient  # noqa: E402

BUSAN_LAT = 35.1595
BUSAN_LON = 129.1626


@pytest.fixture
def feed_payloads():
    """One realistic response per feed, keyed by feed name."""
    return {
        "tide": [
            {
                "pThisDate": "2025-08-22",
                "pTime1": "05:10 (110) ▲+75",
                "pTime2": "11:20 (35) ▼-75",
                "pSun": "06:09/19:41",
            },
            {
                "pThisDate": "2025-08-23",
                "pTime1": "06:00 (120) ▲+80",
                "pTime2": "12:00 (30) ▼-90",
                "pTime3": "18:00 (115) ▲+85",
                "pTime4": "23:30 (28) ▼-87",
                "pSun": "06:10/19:40",
            },
        ],
        "current": {
            "weather": [
                {"aplYmdt": "2025082309", "sky": "흐림", "temp": "25.0", "windspd": "5.0", "winddir": "N", "pago": "0.4"},
                {"aplYmdt": "2025082312", "sky": "맑음", "temp": "27.1", "windspd": "3.2", "winddir": "NE", "pago": "0.6"},
            ]
        },
        "forecast": [
            {"ymdt": "2025082310", "sky": "맑음", "temp": "26.0", "windspd": "4.0", "winddir": "N", "waveHt": "0.5"},
            {
                "ymdt": "2025082312",
                "sky": "구름많음",
                "temp": "28.0",
                "windspd": "",
                "winddir": "E",
                "wave\u200bHt": "0.8",
                "wavePrd": "6",
                "waveDir": "SE",
            },
            {"ymdt": "2025082315", "sky": "비", "temp": "24.0", "windspd": "7.5", "winddir": "S", "waveHt": "1.5"},
        ],
        "temp": [
            {"lat": "37.45", "lon": "126.59", "obs_wt": "21.0"},
            {"lat": "35.10", "lon": "129.03", "obs_wt": "24.5"},
            {"lat": "bad", "lon": "129.16", "obs_wt": "99.9"},
        ],
        "visibility": {
            "hourly": {
                "time": ["2025-08-23T12:00", "2025-08-23T13:00", "2025-08-23T14:00"],
                "visibility": [9000, 8040, 12000],
            }
        },
    }


@pytest.fixture
def make_resolver(feed_payloads):
    """Build a ContextResolver whose feeds are served by httpx.MockTransport."""
    created = []

    def _make(failing=(), raise_on=(), calls=None):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.host == "api.open-meteo.com":
                name = "visibility"
            else:
                name = request.url.path.rsplit("/", 1)[-1]
            if calls is not None:
                calls.append(request)
            if name in raise_on:
                raise httpx.ConnectTimeout("timed out", request=request)
            if name in failing:
                return httpx.Response(503, text="feed down")
            return httpx.Response(200, json=feed_payloads[name])

        env = {"BADA_API_BASE": "https://feeds.test/DIVE", "BADA_API_KEY": "secret-key"}
        cfg = Cfg(env)
        resolver = ContextResolver(cfg, client=FeedClient(cfg, transport=httpx.MockTransport(handler)))
        created.append(resolver)
        return resolver

    yield _make
    for resolver in created:
        resolver.close()
