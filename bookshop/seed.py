import logging

from bookshop.application.ports import UnitOfWork, PasswordHasher
from bookshop.application.use_cases.catalog import refresh_category_product_counts
from bookshop.domain.catalog import CategoryData, ProductData, ReviewData
from bookshop.domain.user import UserData

logger = logging.getLogger(__name__)

CATEGORIES = [
    {"name": "Roman", "icon": "fas fa-book"},
    {"name": "Bilim Kurgu", "icon": "fas fa-rocket"},
    {"name": "Tarih", "icon": "fas fa-landmark"},
    {"name": "Çocuk Kitapları", "icon": "fas fa-child"},
    {"name": "Kişisel Gelişim", "icon": "fas fa-brain"},
    {"name": "Akademik", "icon": "fas fa-graduation-cap"},
]

# category は CATEGORIES の添字
PRODUCTS = [
    {
        "name": "Suç ve Ceza",
        "description": "Fyodor Dostoyevski'nin en ünlü eserlerinden. Sıradan bir öğrenci olan Raskolnikov'un düşüncelerini ve eylemlerini konu alır.",
        "price": 89,
        "discount_price": 75,
        "category": 0,
        "image_url": "https://images.pexels.com/photos/159711/books-bookstore-book-reading-159711.jpeg",
        "is_featured": True,
        "is_bestseller": True,
        "discount_percentage": 15,
    },
    {
        "name": "Dune",
        "description": "Frank Herbert'in kaleme aldığı bilim kurgu klasiği, uzak bir gelecekte geçen epik bir macera.",
        "price": 129,
        "category": 1,
        "image_url": "https://images.pexels.com/photos/2067569/pexels-photo-2067569.jpeg",
        "is_featured": True,
        "is_new": True,
    },
    {
        "name": "Kişisel Gelişim ve Motivasyon",
        "description": "Hayatınızı değiştirecek en etkili kişisel gelişim teknikleri ve motivasyon stratejileri.",
        "price": 75,
        "category": 4,
        "image_url": "https://images.pexels.com/photos/904616/pexels-photo-904616.jpeg",
        "is_featured": True,
    },
    {
        "name": "Osmanlı İmparatorluğu Tarihi",
        "description": "Detaylı anlatımlarla Osmanlı İmparatorluğu'nun kuruluşundan yıkılışına kadar olan tarihsel süreci.",
        "price": 145,
        "discount_price": 120,
        "category": 2,
        "image_url": "https://images.pexels.com/photos/3747279/pexels-photo-3747279.jpeg",
        "is_featured": True,
        "discount_percentage": 15,
    },
    {
        "name": "1984",
        "description": "George Orwell'in distopik klasiği, totaliter bir rejim altında yaşayan Winston Smith'in hikayesi.",
        "price": 65,
        "category": 0,
        "image_url": "https://images.pexels.com/photos/1907785/pexels-photo-1907785.jpeg",
        "is_bestseller": True,
    },
    {
        "name": "Çocuk Masalları Antolojisi",
        "description": "Tüm zamanların en sevilen çocuk masallarını içeren renkli resimli kitap.",
        "price": 95,
        "discount_price": 75,
        "category": 3,
        "image_url": "https://images.pexels.com/photos/264635/pexels-photo-264635.jpeg",
        "is_bestseller": True,
        "discount_percentage": 20,
    },
    {
        "name": "Python ile Veri Analizi",
        "description": "Python programlama dili kullanarak veri analizi ve makine öğrenmesi uygulamaları.",
        "price": 175,
        "category": 5,
        "image_url": "https://images.pexels.com/photos/2170/creative-desk-pens-school.jpg",
        "is_new": True,
    },
    {
        "name": "Hayvan Çiftliği",
        "description": "George Orwell'in alegorik romanı, bir çiftlikte yaşanan devrim ve sonrasını anlatır.",
        "price": 55,
        "discount_price": 45,
        "category": 0,
        "image_url": "https://images.pexels.com/photos/2099691/pexels-photo-2099691.jpeg",
        "is_bestseller": True,
        "discount_percentage": 15,
    },
]

USERS = [
    {"username": "ayse_yilmaz", "email": "ayse@example.com", "password": "password123", "full_name": "Ayşe Yılmaz", "avatar": "https://randomuser.me/api/portraits/women/12.jpg"},
    {"username": "mehmet_kaya", "email": "mehmet@example.com", "password": "password123", "full_name": "Mehmet Kaya", "avatar": "https://randomuser.me/api/portraits/men/22.jpg"},
    {"username": "zeynep_demir", "email": "zeynep@example.com", "password": "password123", "full_name": "Zeynep Demir", "avatar": "https://randomuser.me/api/portraits/women/32.jpg"},
    {"username": "admin", "email": "admin@ergilishop.com", "password": "admin123", "full_name": "Site Yöneticisi", "avatar": "https://randomuser.me/api/portraits/men/1.jpg"},
]

# (商品の添字, ユーザーの添字, 評価, コメント)
REVIEWS = [
    (0, 0, 5, "Harika bir roman, Dostoyevski'nin dehasını gösteren bir başyapıt."),
    (0, 1, 4, "Etkileyici bir hikaye ama biraz ağır bir dil kullanılmış."),
    (1, 0, 4, "Bilim kurgu türünün başyapıtlarından, kesinlikle okunmalı."),
    (1, 2, 5, "Muazzam bir hayal gücü ve etkileyici bir dünya yaratımı."),
    (2, 1, 3, "Bazı teknikleri faydalı ama daha fazla örnek olabilirdi."),
    (3, 2, 5, "Osmanlı tarihi hakkında çok detaylı bir çalışma, çok beğendim."),
    (4, 0, 5, "Bugün bile geçerliliğini koruyan, insanı düşündüren bir başyapıt."),
    (5, 1, 4, "Çocuğum çok sevdi, harika resimler ve eğlenceli hikayeler."),
    (6, 2, 4, "Python öğrenmek için ideal, örnekler çok açıklayıcı."),
    (7, 0, 4, "Kısa ama etkili bir kitap, mesajı çok net."),
]


# すでにデータがある場合は何もしない
def seed_sample_data(uow: UnitOfWork, hasher: PasswordHasher) -> bool:
    with uow:
        if uow.categories.list_all() or uow.users.list_all():
            logger.info("Store already has data, skipping sample data")
            return False

        categories = [uow.categories.add(CategoryData(**data)) for data in CATEGORIES]
        products = []
        for data in PRODUCTS:
            fields = dict(data)
            category = categories[fields.pop("category")]
            products.append(uow.products.add(ProductData(category_id=category.id, **fields)))
        refresh_category_product_counts(uow)

        users = []
        for data in USERS:
            fields = dict(data)
            fields["password"] = hasher.hash(fields["password"])
            users.append(uow.users.add(UserData(**fields)))

        for product_index, user_index, rating, comment in REVIEWS:
            uow.reviews.add(
                ReviewData(
                    product_id=products[product_index].id,
                    user_id=users[user_index].id,
                    rating=rating,
                    comment=comment,
                )
            )
        uow.commit()
        logger.info(
            f"Loaded sample data: {len(categories)} categories, {len(products)} products, "
            f"{len(users)} users, {len(REVIEWS)} reviews"
        )
        return True
