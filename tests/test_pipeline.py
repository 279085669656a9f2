import json

import pytest

from common.settings import Settings
from etl import cli
from etl.pipeline import load_events_jsonl, options_from_settings, run_pipeline
from ingestion.parser import EventParseError
from storage.base import StoreContext
from storage.sqlite_backend import SQLiteStore

PUNKS = "0xb47e3cd837dDF8e4c57F05d70Ab865de6e193BBB"
DROP = "0xBd3531dA5CF5857e7CfAA92426877b022e612cf8"


def _rec(tx, contract, event, params, src=""):
    return {
        "contract": contract,
        "event": event,
        "chainId": 1,
        "block": {"number": 18000000, "timestamp": 1700000000},
        "transaction": {"hash": tx},
        "logIndex": 0,
        "srcAddress": src,
        "params": params,
    }


RECORDS = [
    _rec("0xp1", "CryptoPunks", "PunkBought", {
        "tokenId": 123, "value": "1000000000000000000",
        "fromAddress": "0xBBB0000000000000000000000000000000000001",
        "toAddress": "0xAAA0000000000000000000000000000000000002",
    }, src=PUNKS),
    _rec("0xm1", "Seadrop", "SeaDropMint", {
        "nftContract": DROP, "minter": "0xAAA0000000000000000000000000000000000002",
        "feeRecipient": "0xfee0000000000000000000000000000000000005",
        "payer": "0xAAA0000000000000000000000000000000000002",
        "quantityMinted": 3, "unitMintPrice": "500000000000000000",
    }),
    _rec("0xf1", "Foundation", "ReserveAuctionFinalized", {
        "auctionId": 7, "seller": "0x1", "bidder": "0x2",
        "protocolFee": 1, "creatorFee": 1, "sellerRev": 1,
    }),
]


def _write_jsonl(path, records):
    path.write_text("\n".join(json.dumps(r) for r in records) + "\n\n", encoding="utf-8")
    return str(path)


def test_load_events_jsonl_skips_blank_lines(tmp_path):
    p = _write_jsonl(tmp_path / "events.jsonl", RECORDS)
    assert [r["transaction"]["hash"] for r in load_events_jsonl(p)] == ["0xp1", "0xm1", "0xf1"]


def test_load_events_jsonl_bad_line(tmp_path):
    p = tmp_path / "bad.jsonl"
    p.write_text('{"ok": 1}\nnot json\n', encoding="utf-8")
    with pytest.raises(EventParseError):
        list(load_events_jsonl(str(p)))


@pytest.mark.asyncio
async def test_run_pipeline_on_sqlite_is_replay_safe(tmp_path):
    st = SQLiteStore(str(tmp_path / "sales.db"))
    st.setup()
    ctx = StoreContext(st)

    stats = await run_pipeline(RECORDS, ctx)
    assert stats == {"events": 3, "sales": 4, "no_sale": 1}

    # redelivering the same batch must not change the store
    await run_pipeline(RECORDS, ctx, options_from_settings(Settings()))
    sales = await ctx.sale.get_all()
    assert len(sales) == 4
    assert (await ctx.seadrop_counter.get(DROP)).counter == 3
    st.close()


def test_options_from_settings():
    s = Settings.model_validate({
        "normalizer": {"drop_empty_items": True},
        "seadrop": {"token_id_source": "receipt", "aliases": {"0xShim": {"canonical": DROP, "start": 1}}},
    })
    opts = options_from_settings(s)
    assert opts.drop_empty_items is True
    assert opts.seadrop_aliases["0xShim"].canonical == DROP
    assert opts.seadrop_aliases["0xShim"].start == 1
    assert opts.token_id_resolver is not None

    assert options_from_settings(Settings()).token_id_resolver is None


def test_cli_main_writes_sqlite(tmp_path, capsys):
    events = _write_jsonl(tmp_path / "events.jsonl", RECORDS[:1])
    db = tmp_path / "cli.db"
    rc = cli.main([
        "--events", events,
        "--backend", "sqlite",
        "--sqlite-path", str(db),
        "--config", str(tmp_path / "missing.yaml"),
    ])
    assert rc == 0
    assert "wrote 1 sales" in capsys.readouterr().out
    assert db.exists()
