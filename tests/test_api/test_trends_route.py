"""Tests for the trend statistics endpoints."""

from datetime import date

from trend_monitor.trends.schemas import (
    KeywordTrend,
    SourceCount,
    TrendKeyword,
    TrendPoint,
    TrendsOverview,
)


class TestOverview:
    def test_overview(self, client, mock_trends_service):
        hot = TrendKeyword("k1", "Cloudflare D1", 12, 1, 1100.0, True)
        mock_trends_service.get_overview.return_value = TrendsOverview(
            top_keywords=[hot],
            emerging_keywords=[hot],
            total_mentions=12,
            source_breakdown=[SourceCount("reddit", 12)],
        )

        resp = client.get("/trends/overview", params={"from": "2026-01-14", "to": "2026-01-20"})

        assert resp.status_code == 200
        data = resp.json()
        assert data["total_mentions"] == 12
        assert data["emerging_keywords"][0]["is_emerging"] is True
        assert data["source_breakdown"] == [{"source": "reddit", "count": 12}]
        mock_trends_service.get_overview.assert_awaited_once_with(
            from_date=date(2026, 1, 14), to_date=date(2026, 1, 20)
        )

    def test_default_window(self, client, mock_trends_service):
        mock_trends_service.get_overview.return_value = TrendsOverview()

        resp = client.get("/trends/overview")

        assert resp.status_code == 200
        mock_trends_service.get_overview.assert_awaited_once_with(from_date=None, to_date=None)

    def test_reversed_window(self, client, mock_trends_service):
        resp = client.get("/trends/overview", params={"from": "2026-01-20", "to": "2026-01-14"})

        assert resp.status_code == 400
        mock_trends_service.get_overview.assert_not_called()


class TestKeywordTrend:
    def test_series(self, client, mock_trends_service):
        mock_trends_service.get_keyword_trend.return_value = KeywordTrend(
            keyword_id="k1",
            name="Cloudflare D1",
            time_series=[
                TrendPoint(date(2026, 1, 20), "reddit", 3),
                TrendPoint(date(2026, 1, 21), "reddit", 5),
            ],
            total_mentions=8,
            average_per_day=4.0,
        )

        resp = client.get("/trends/k1", params={"source": "reddit"})

        assert resp.status_code == 200
        data = resp.json()
        assert data["time_series"][0] == {"date": "2026-01-20", "source": "reddit", "count": 3}
        assert data["average_per_day"] == 4.0
        assert mock_trends_service.get_keyword_trend.call_args.kwargs["source"] == "reddit"

    def test_unknown_keyword(self, client, mock_trends_service):
        mock_trends_service.get_keyword_trend.return_value = None

        assert client.get("/trends/missing").status_code == 404

    def test_service_error(self, client, mock_trends_service):
        mock_trends_service.get_keyword_trend.side_effect = RuntimeError("db down")

        resp = client.get("/trends/k1")

        assert resp.status_code == 500
        assert resp.json()["detail"] == "Failed to compute keyword trend"
