from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone

import pytest

from walletbot.database import Database
from walletbot.errors import WalletNotFoundError

TEST_CHAT_ID = 12345


@pytest.fixture
def db():
    database = Database(":memory:")
    yield database
    database.close()


def test_database_operations(db):
    wallet = db.get_or_create_wallet(TEST_CHAT_ID, "测试钱包")
    assert wallet.name == "测试钱包"
    assert wallet.current_balance == 0.0

    db.update_wallet_balance(TEST_CHAT_ID, "测试钱包", 1000.0)
    updated = db.get_or_create_wallet(TEST_CHAT_ID, "测试钱包")
    assert updated.current_balance == 1000.0
    assert updated.id == wallet.id

    db.record_transaction(TEST_CHAT_ID, "测试钱包", "出账", 150.0, "12", "2024", 456)
    db.record_message(123, TEST_CHAT_ID, "测试钱包", True, 1000.0, 850.0)
    assert db.is_message_processed(123, TEST_CHAT_ID)

    transactions = db.get_transactions(TEST_CHAT_ID, "测试钱包")
    assert len(transactions) == 1
    assert transactions[0].transaction_type == "出账"
    assert transactions[0].amount == 150.0
    assert transactions[0].message_id == 456
    assert transactions[0].month == "12"
    assert transactions[0].year == "2024"


def test_duplicate_message_handling(db):
    db.get_or_create_wallet(TEST_CHAT_ID, "支付宝")
    db.record_message(123, TEST_CHAT_ID, "支付宝", True, 1000.0, 850.0)
    assert db.is_message_processed(123, TEST_CHAT_ID) is True
    assert db.is_message_processed(124, TEST_CHAT_ID) is False
    assert db.is_message_processed(123, TEST_CHAT_ID + 1) is False


def test_record_message_twice_replaces(db):
    db.get_or_create_wallet(TEST_CHAT_ID, "支付宝")
    db.record_message(7, TEST_CHAT_ID, "支付宝", False)
    db.record_message(7, TEST_CHAT_ID, "支付宝", True, 1.0, 2.0)
    assert db.is_message_processed(7, TEST_CHAT_ID)


def test_concurrent_wallet_creation(db):
    names = [f"并发测试钱包{i}" for i in range(10)]
    with ThreadPoolExecutor(max_workers=5) as pool:
        wallets = list(pool.map(lambda n: db.get_or_create_wallet(TEST_CHAT_ID, n), names))
    assert len({w.id for w in wallets}) == 10
    assert all(db.wallet_exists(TEST_CHAT_ID, n) for n in names)


def test_multi_chat_wallet_isolation(db):
    wallet_1 = db.get_or_create_wallet(12345, "支付宝")
    wallet_2 = db.get_or_create_wallet(67890, "支付宝")
    assert wallet_1.id != wallet_2.id
    assert wallet_1.chat_id == 12345
    assert wallet_2.chat_id == 67890

    db.update_wallet_balance(12345, "支付宝", 100.0)
    db.update_wallet_balance(67890, "支付宝", 200.0)
    assert db.get_balance(12345, "支付宝") == 100.0
    assert db.get_balance(67890, "支付宝") == 200.0

    db.record_transaction(12345, "支付宝", "入账", 50.0, "12", "2024", None)
    db.record_transaction(67890, "支付宝", "出账", 30.0, "12", "2024", None)
    transactions_1 = db.get_transactions(12345, "支付宝")
    transactions_2 = db.get_transactions(67890, "支付宝")
    assert len(transactions_1) == 1
    assert len(transactions_2) == 1
    assert transactions_1[0].chat_id == 12345
    assert transactions_2[0].chat_id == 67890


def test_same_wallet_different_chats(db):
    chat_ids = [11111, 22222, 33333]
    wallet_names = ["微信", "支付宝", "银行卡"]
    for chat_id in chat_ids:
        for name in wallet_names:
            wallet = db.get_or_create_wallet(chat_id, name)
            assert wallet.chat_id == chat_id
            assert wallet.name == name
            db.update_wallet_balance(chat_id, name, chat_id / 1000.0)

    for chat_id in chat_ids:
        for name in wallet_names:
            assert db.get_balance(chat_id, name) == chat_id / 1000.0
            assert db.wallet_exists(chat_id, name)

    db.add_transaction(chat_ids[0], "微信", "入账", 100.0, "测试交易", "tx1")
    db.add_transaction(chat_ids[1], "微信", "出账", 50.0, "测试交易", "tx2")
    balance_0 = db.get_balance(chat_ids[0], "微信")
    balance_1 = db.get_balance(chat_ids[1], "微信")
    assert balance_0 == pytest.approx(111.111)
    assert balance_1 == pytest.approx(-27.778)
    assert balance_0 != balance_1


def test_add_transaction_creates_wallet_and_dates_now(db):
    db.add_transaction(TEST_CHAT_ID, "新钱包", "收入", 100.0, "工资", "tx")
    assert db.get_balance(TEST_CHAT_ID, "新钱包") == 100.0
    (transaction,) = db.get_transactions(TEST_CHAT_ID, "新钱包")
    now = datetime.now(timezone.utc)
    assert transaction.month == f"{now.month:02d}"
    assert transaction.year == str(now.year)
    assert transaction.message_id is None


def test_add_transaction_unknown_type_subtracts(db):
    db.add_transaction(TEST_CHAT_ID, "钱包", "入账", 200.0, "初始余额", "tx1")
    db.add_transaction(TEST_CHAT_ID, "钱包", "其他", 30.0, "未知", "tx2")
    db.add_transaction(TEST_CHAT_ID, "钱包", "支出", 20.0, "午餐", "tx3")
    assert db.get_balance(TEST_CHAT_ID, "钱包") == 150.0
    assert len(db.get_transactions(TEST_CHAT_ID, "钱包")) == 3


def test_transactions_newest_first(db):
    db.get_or_create_wallet(TEST_CHAT_ID, "钱包")
    db.record_transaction(TEST_CHAT_ID, "钱包", "入账", 1.0, "01", "2024", 1)
    db.record_transaction(TEST_CHAT_ID, "钱包", "入账", 2.0, "01", "2024", 2)
    amounts = [t.amount for t in db.get_transactions(TEST_CHAT_ID, "钱包")]
    assert amounts == [2.0, 1.0]


def test_missing_wallet_errors(db):
    assert db.wallet_exists(TEST_CHAT_ID, "不存在") is False
    with pytest.raises(WalletNotFoundError):
        db.get_balance(TEST_CHAT_ID, "不存在")
    with pytest.raises(WalletNotFoundError):
        db.get_transactions(TEST_CHAT_ID, "不存在")
    with pytest.raises(WalletNotFoundError):
        db.record_transaction(TEST_CHAT_ID, "不存在", "出账", 1.0, "1", "2024", None)
    with pytest.raises(WalletNotFoundError):
        db.record_message(1, TEST_CHAT_ID, "不存在", False, None, None)


def test_get_latest_balance(db):
    db.create_wallet(TEST_CHAT_ID, "钱包")
    db.update_wallet_balance(TEST_CHAT_ID, "钱包", 42.5)
    assert db.get_latest_balance(TEST_CHAT_ID, "钱包", "12月", "2024年") == 42.5


def test_persists_to_file(tmp_path):
    path = str(tmp_path / "wallet.db")
    with Database(path) as first:
        first.get_or_create_wallet(TEST_CHAT_ID, "钱包")
        first.update_wallet_balance(TEST_CHAT_ID, "钱包", 9.0)
    with Database(path) as second:
        wallet = second.get_or_create_wallet(TEST_CHAT_ID, "钱包")
        assert wallet.current_balance == 9.0
        assert wallet.created_at is not None