# init.py
"""
Munira's Delights - заказы с сайта и из Telegram в чат пекарни.

Структура:
- app/ - основное приложение
  - api/ - FastAPI (шлюз заказов /api/order, /api/upload, /api/telegram)
  - gateway/ - разбор запроса, форматирование, пересылка в Telegram
  - client/ - отправка заказа в шлюз
  - bot/ - витринный Telegram бот (мастер заказа)
  - catalog.py, cart.py, wizard.py - каталог, корзина, мастер
- config/ - конфигурация (settings.py)
- infrastructure/ - логирование, Redis для FSM
"""

__version__ = "1.0.0"
__description__ = "Bakery storefront orders relayed to Telegram"
