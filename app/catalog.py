# app/catalog.py
"""
🍰 КАТАЛОГ

Статичный список того что можно заказать.
Во время работы только читается.
"""

from typing import List, Optional, Union

from app.models import Category, Language, MenuItem

EN, AM, AR = Language.EN, Language.AM, Language.AR


MENU_ITEMS: List[MenuItem] = [
    MenuItem(
        id="cake1",
        name={EN: "Chocolate Fudge Cake", AM: "የቸኮሌት ኬክ", AR: "كعكة الشوكولاتة"},
        description={
            EN: "Rich layered chocolate cake with fudge frosting.",
            AM: "በቸኮሌት የተሞላ ባለ ብዙ ንብርብር ኬክ።",
            AR: "كعكة شوكولاتة غنية بطبقات من الفدج.",
        },
        price=20,
        category=Category.CAKES,
        image="/images/chocolate-cake.jpg",
    ),
    MenuItem(
        id="cake2",
        name={EN: "Red Velvet Cake", AM: "ሬድ ቬልቬት ኬክ", AR: "كعكة ريد فيلفيت"},
        description={
            EN: "Classic red velvet with cream cheese frosting.",
            AM: "ክላሲክ ሬድ ቬልቬት ከክሬም ቺዝ ጋር።",
            AR: "ريد فيلفيت كلاسيكية مع كريمة الجبن.",
        },
        price=25,
        category=Category.CAKES,
        image="/images/red-velvet.jpg",
    ),
    MenuItem(
        id="cake3",
        name={EN: "Custom Birthday Cake", AM: "የልደት ኬክ", AR: "كعكة عيد ميلاد"},
        description={
            EN: "Decorated to order for birthdays and celebrations.",
            AM: "ለልደት እና ለበዓላት በትዕዛዝ የሚዘጋጅ።",
            AR: "تزين حسب الطلب لأعياد الميلاد والمناسبات.",
        },
        price=45,
        category=Category.CAKES,
        image="/images/birthday-cake.jpg",
    ),
    MenuItem(
        id="pastry1",
        name={EN: "Butter Croissant", AM: "ክሮሳን", AR: "كرواسون بالزبدة"},
        description={
            EN: "Flaky, golden croissant baked every morning.",
            AM: "በየጠዋቱ የሚጋገር ክሮሳን።",
            AR: "كرواسون ذهبي هش يخبز كل صباح.",
        },
        price=3,
        category=Category.PASTRIES,
        image="/images/croissant.jpg",
    ),
    MenuItem(
        id="pastry2",
        name={EN: "Baklava Box", AM: "ባቅላቫ", AR: "علبة بقلاوة"},
        description={
            EN: "A dozen pieces of honey and pistachio baklava.",
            AM: "በማር እና ፒስታቺዮ የተሰራ ባቅላቫ።",
            AR: "اثنا عشر قطعة بقلاوة بالعسل والفستق.",
        },
        price=12,
        category=Category.PASTRIES,
        image="/images/baklava.jpg",
    ),
    MenuItem(
        id="catering1",
        name={EN: "Party Platter", AM: "የድግስ ትሪ", AR: "طبق الحفلات"},
        description={
            EN: "Assorted mini pastries for 20 guests.",
            AM: "ለ20 እንግዶች የተለያዩ ትናንሽ ኬኮች።",
            AR: "معجنات صغيرة متنوعة لعشرين ضيفا.",
        },
        price=80,
        category=Category.CATERING,
        image="/images/platter.jpg",
    ),
    MenuItem(
        id="icecream1",
        name={EN: "Vanilla Gelato", AM: "ቫኒላ አይስክሬም", AR: "جيلاتو الفانيليا"},
        description={
            EN: "Slow-churned vanilla gelato, 500 ml.",
            AM: "ቫኒላ አይስክሬም፣ 500 ሚሊ።",
            AR: "جيلاتو فانيليا، 500 مل.",
        },
        price=6,
        category=Category.ICECREAM,
        image="/images/gelato.jpg",
    ),
]

_BY_ID = {item.id: item for item in MENU_ITEMS}


def get_item(item_id: str) -> Optional[MenuItem]:
    """Позиция по id или None."""
    return _BY_ID.get(item_id)


def price_of(item_id: str) -> Optional[float]:
    """Цена для корзины. None = такой позиции в меню нет."""
    item = _BY_ID.get(item_id)
    return item.price if item else None


def items_by_category(category: Union[Category, str] = "all") -> List[MenuItem]:
    """Фильтр меню как на сайте: 'all' возвращает всё."""
    if category == "all":
        return list(MENU_ITEMS)
    return [item for item in MENU_ITEMS if item.category == Category(category)]
