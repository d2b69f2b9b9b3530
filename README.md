# walletbot

walletbot keeps running balances for named wallets that are kept in chat
messages. A message in a fixed hashtag format is parsed, the wallet's new
balance is worked out, a `#总额` line is appended to the message and the
transaction is stored in a SQLite database. Each chat has its own set of
wallets, so the same wallet name in two chats refers to two separate balances.

## Message format

```
#钱包名称 #月份 #年份
#出账/入账 金额元
```

For example:

```
#支付宝 #12月 #2024年
#出账 150.00元
```

`#出账` subtracts the amount from the wallet, `#入账` adds it. When a message
already carries a total, such as `#总额 1000.00元`, that total becomes the
wallet's new balance instead of being calculated. A message that has already
been processed is not recorded a second time; a warning is sent instead.

## Parsing

```python
from walletbot.parser import MessageParser

parser = MessageParser()
parsed = parser.parse("#支付宝 #12月 #2024年\n#出账 150.00元")
parsed.wallet_name       # "支付宝"
parsed.transaction_type  # "出账"
parsed.amount            # 150.0
parsed.month             # "12月"
parsed.year              # "2024年"

parser.is_wallet_message("这是一个普通消息")  # False
parser.has_total("#支付宝 #12月 #2024年\n#出账 150.00元\n#总额 1000.00元")             # True
parser.extract_total_amount("#支付宝 #12月 #2024年\n#出账 150.00元\n#总额 1000.00元")  # 1000.0
```

`parse` returns `None` when a part of the message is missing.
`MessageParser.parse_transaction` reads the short form
`收入|支出 <金额> <描述>` and raises `walletbot.errors.ParserError` when the
text does not fit it.

## Storage and balances

`walletbot.database.Database` takes a SQLite path (or `":memory:"`) and can be
used as a context manager:

```python
from walletbot.database import Database
from walletbot.calculator import BalanceCalculator

with Database(":memory:") as db:
    db.get_or_create_wallet(12345, "支付宝")
    db.add_transaction(12345, "支付宝", "入账", 200.0, "工资", "tx1")
    db.get_balance(12345, "支付宝")          # 200.0

    calculator = BalanceCalculator(db)
    update = calculator.smart_calculate_balance(
        12345, "支付宝", "出账", 50.0, "12月", "2024年", None, None
    )
    update.new_balance                       # 150.0
```

`get_transactions` returns a wallet's transactions newest first; asking for a
wallet that does not exist raises `WalletNotFoundError`.

## Handling messages

`walletbot.handler.MessageHandler` ties parser, calculator and database
together. Its `handle_message` and `reprocess_message` coroutines take an
object implementing `walletbot.botapi.BotApi` (`send_message`,
`edit_message_text`, `delete_message`, `reply_to_message`) and an
`IncomingMessage` with its `Chat`. The handler edits the message to add the
total, records the transaction and the message state, and sends a
confirmation, a duplicate warning or a format help text as appropriate.

## Helpers

`walletbot.utils` holds formatting, validation, logging and backup helpers:

```python
from walletbot.utils import format_amount, format_balance_change, is_valid_month

format_amount(1000.5)                  # "1000.50元"
format_balance_change(1000.0, 1100.0)  # "+100.00元 (+10.0%)"
is_valid_month("13")                   # False
```

`backup_file` copies a file into a backup directory under a timestamped name,
and `cleanup_old_backups` deletes entries older than a number of days.

## Errors and retries

Failures are raised as subclasses of `walletbot.errors.WalletBotError`. Each
error reports a `severity()` (`ErrorSeverity`) and whether it
`is_retryable()`. The coroutine `walletbot.retry.retry_with_backoff` retries
retryable errors with exponential backoff according to a `RetryConfig`, and
raises non-retryable ones at once.

## What the package does not do

The package does not connect to any messaging service. It has no client for
the Telegram Bot API, no update loop, no handling of the `/start`, `/help`,
`/reprocess` or `/status` commands and no command to run. To run a bot, supply
your own `BotApi` implementation and feed incoming messages to
`MessageHandler.handle_message`.