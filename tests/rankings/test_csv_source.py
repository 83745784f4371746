from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import pytest

from fantasy_football_manager.domain.ranking import DEFAULT_MARKET_VALUE, RankingAdjustment
from fantasy_football_manager.exceptions import ProviderError
from fantasy_football_manager.rankings.csv_source import CsvRankingSource

if TYPE_CHECKING:
    from pathlib import Path


def _write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "board.csv"
    path.write_text(text, encoding="utf-8")
    return path


class TestCsvRankingSource:
    def test_reads_and_sorts_by_rank(self, tmp_path: Path) -> None:
        path = _write(
            tmp_path,
            "name,position,rank,team,age,value\n"
            "Bijan Robinson,RB,2,ATL,23,8800\n"
            "Ja'Marr Chase,WR,1,CIN,25,9500\n"
            "Sam LaPorta,TE,20,DET,24,\n",
        )
        pool = CsvRankingSource(path).read_pool(10)
        assert [e.name for e in pool.entries] == ["Ja'Marr Chase", "Bijan Robinson", "Sam LaPorta"]
        assert pool.entries[0].team == "CIN"
        assert pool.entries[0].age == 25.0
        assert pool.entries[2].market_value == DEFAULT_MARKET_VALUE

    def test_bom_and_mixed_case_headers(self, tmp_path: Path) -> None:
        path = _write(tmp_path, "\ufeffName,POS,ADP\nJosh Allen,qb,5.5\n")
        (entry,) = CsvRankingSource(path).read_pool(10).entries
        assert (entry.name, entry.position, entry.rank) == ("Josh Allen", "QB", 5.5)

    def test_skips_unusable_rows(self, tmp_path: Path) -> None:
        path = _write(
            tmp_path,
            "name,position,rank\n"
            ",WR,3\n"
            "Justin Tucker,K,150\n"
            "Breece Hall,RB,not-a-number\n",
        )
        (entry,) = CsvRankingSource(path).read_pool(10).entries
        assert entry.name == "Breece Hall"
        assert entry.rank == 999.0

    def test_news_columns_become_adjustments(self, tmp_path: Path) -> None:
        path = _write(
            tmp_path,
            "name,position,rank,news_delta,news_reasons\n"
            "Puka Nacua,WR,8,-6,Injury | Depth chart\n"
            "Kyren Williams,RB,14,,\n",
        )
        pool = CsvRankingSource(path).read_pool(10)
        expected = RankingAdjustment(name="Puka Nacua", delta=-6.0, reasons=("Injury", "Depth chart"))
        assert pool.adjustments == (expected,)

    def test_size_trims_entries_and_their_adjustments(self, tmp_path: Path) -> None:
        path = _write(
            tmp_path,
            "name,position,rank,news_delta\n"
            "First,WR,1,2\n"
            "Second,RB,2,3\n",
        )
        pool = CsvRankingSource(path).read_pool(1)
        assert [e.name for e in pool.entries] == ["First"]
        assert [a.name for a in pool.adjustments] == ["First"]

    def test_missing_file_raises_provider_error(self, tmp_path: Path) -> None:
        with pytest.raises(ProviderError, match="csv"):
            CsvRankingSource(tmp_path / "missing.csv").read_pool(10)

    def test_fetch_pool_ignores_format(self, tmp_path: Path) -> None:
        path = _write(tmp_path, "name,position,rank\nCeeDee Lamb,WR,3\n")
        source = CsvRankingSource(path)
        assert asyncio.run(source.fetch_pool("redraft", 5)) == asyncio.run(source.fetch_pool("dynasty", 5))
