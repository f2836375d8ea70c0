# -*- coding: utf-8 -*-
import json


def create(api, **fields):
    response = api.post("/api/orders", json=fields)
    assert response.status_code == 201
    return response.json()


def test_health(api):
    assert api.get("/health").json()["status"] == "ok"


def test_create_issues_padded_incremental_ids(api):
    first = create(api, customer="Иванов")
    second = create(api)

    assert first["id"] == "000001"
    assert first["status"] == "IN_PROGRESS"
    assert second["id"] == "000002"
    assert second["status"] == "NEW"
    assert second["date"]


def test_next_id_follows_highest_existing(api, settings):
    orders = [{"id": str(n).zfill(6), "customer": f"Клиент {n}"} for n in range(1, 42)]
    (settings.DATA_DIR / "orders.json").write_text(json.dumps(orders), encoding="utf-8")

    assert create(api, car="Lada")["id"] == "000042"


def test_update_merges_and_keeps_absent_fields(api):
    order = create(api, customer="Иванов", car="Kia Rio")

    response = api.put(f"/api/orders/{order['id']}", json={"reason": "Стук", "pdfUrl": None})

    assert response.status_code == 200
    body = response.json()
    assert body["customer"] == "Иванов"
    assert body["reason"] == "Стук"


def test_update_settles_status(api):
    order = create(api)
    paid = api.put(f"/api/orders/{order['id']}", json={
        "payments": [{"id": 1, "date": "01.01.2024", "method": "cash", "amount": 100}],
    }).json()
    assert paid["status"] == "PAYED"

    corrected = api.put(f"/api/orders/{order['id']}", json={"status": "IN_PROGRESS"}).json()
    assert corrected["status"] == "IN_PROGRESS"


def test_unknown_order_is_404(api):
    assert api.get("/api/orders/999999").status_code == 404
    response = api.put("/api/orders/999999", json={"customer": "X"})
    assert response.status_code == 404
    assert response.json() == {"detail": "Заказ не найден"}
    assert api.delete("/api/orders/999999").status_code == 404


def test_delete_order(api):
    order = create(api, customer="Иванов")

    assert api.delete(f"/api/orders/{order['id']}").status_code == 204
    assert api.get(f"/api/orders/{order['id']}").status_code == 404


def test_list_filters(api):
    create(api, customer="Иванов", phone="+7 900 123-45-67")
    create(api, customer="Петров", status="PENDING_PAYMENT")

    assert [o["customer"] for o in api.get("/api/orders", params={"q": "9001234"}).json()] == ["Иванов"]
    assert [o["customer"] for o in api.get("/api/orders/pending").json()] == ["Петров"]
    assert len(api.get("/api/orders", params={"status": "PENDING_PAYMENT"}).json()) == 1


def test_services_search_and_duplicates(api):
    names = api.get("/api/services", params={"q": "замена"}).json()
    assert "Замена свечей" in names
    assert all("замена" in name.lower() for name in names)

    created = api.post("/api/services", json={"name": "  Шиномонтаж   R16 "})
    assert created.status_code == 201
    assert created.json()["name"] == "Шиномонтаж R16"

    assert api.post("/api/services", json={"name": "шиномонтаж r16"}).status_code == 409
    assert api.post("/api/services", json={"name": "   "}).status_code == 400

    record_id = created.json()["id"]
    assert api.put(f"/api/services/{record_id}", json={"name": "Замена свечей"}).status_code == 409
    assert api.put(f"/api/services/{record_id}", json={"name": "Балансировка"}).json()["name"] == "Балансировка"
    assert api.delete(f"/api/services/{record_id}").status_code == 200
    assert api.delete(f"/api/services/{record_id}").status_code == 404


def test_ticket_upload_download_and_delete(api, settings):
    response = api.post(
        "/api/files/tickets/000005/pdf",
        files={"file": ("ticket-000005.pdf", b"%PDF-1.4 test", "application/pdf")},
    )
    assert response.status_code == 200
    upload = response.json()
    assert upload["path"] == "tickets/000005/ticket-000005.pdf"

    download = api.get(upload["url"])
    assert download.status_code == 200
    assert download.content == b"%PDF-1.4 test"
    assert download.headers["content-type"] == "application/pdf"

    (settings.UPLOAD_DIR / "ticket-000005.pdf").write_bytes(b"%PDF legacy")
    listed = api.get("/api/tickets").json()
    assert {t["name"] for t in listed} == {"ticket-000005.pdf"}
    assert len(listed) == 2

    assert api.delete("/api/tickets/000005").json() == {"deleted": 2}
    assert api.get(upload["url"]).status_code == 404
    assert not (settings.UPLOAD_DIR / "ticket-000005.pdf").exists()


def test_ticket_upload_rejects_non_pdf(api):
    response = api.post(
        "/api/files/tickets/000005/pdf",
        files={"file": ("photo.jpg", b"\xff\xd8", "image/jpeg")},
    )
    assert response.status_code == 400


def test_ticket_upload_size_limit(api, settings):
    settings.MAX_UPLOAD_SIZE = 10
    response = api.post(
        "/api/files/tickets/000005/pdf",
        files={"file": ("ticket.pdf", b"%PDF" + b"0" * 20, "application/pdf")},
    )
    assert response.status_code == 413


def test_ticket_id_is_sanitized(api):
    response = api.post(
        "/api/files/tickets/A-1.b/pdf",
        files={"file": ("ticket.pdf", b"%PDF", "application/pdf")},
    )
    assert response.status_code == 200
    assert response.json()["path"] == "tickets/A-1b/ticket.pdf"

    assert api.delete("/api/tickets/....").status_code == 400


def test_revenue_report(api):
    create(
        api, date="05.03.2024", status="PAYED",
        services=[{"id": 1, "title": "Диагностика", "qty": 1, "price": 2000}],
        parts=[{"id": 1, "title": "Фильтр", "qty": 1, "price": 400}],
        discountPercent=50,
        payments=[{"id": 1, "date": "05.03.2024", "method": "card", "amount": 1400}],
    )
    create(api, date="06.03.2024", customer="Иванов")
    create(
        api, date="01.05.2024",
        services=[{"id": 1, "title": "Диагностика", "qty": 1, "price": 2000}],
        payments=[{"id": 1, "date": "01.05.2024", "method": "cash", "amount": 2000}],
    )

    report = api.get("/api/orders/reports/revenue", params={"date_from": "2024-03-01", "date_to": "2024-03-31"})

    assert report.status_code == 200
    body = report.json()
    assert body["dateFrom"] == "01.03.2024"
    assert body["count"] == 1
    assert body["total"] == 1400
    assert body["card"] == 1400
    assert body["months"] == [
        {"month": "2024-03", "label": "март 2024", "revenue": 1400, "services": 2000, "parts": 400}
    ]
    assert body["services"] == [{"title": "Диагностика", "revenue": 2000}]

    assert api.get("/api/orders/reports/revenue").json()["count"] == 2


def test_revenue_report_rejects_bad_date(api):
    response = api.get("/api/orders/reports/revenue", params={"date_from": "31.02.2024"})
    assert response.status_code == 400


def test_companies_report(api):
    first = create(
        api, company="ООО Ромашка", customer="Иванов",
        services=[{"id": 1, "title": "Диагностика", "qty": 1, "price": 1000}],
    )
    create(api, company="ООО Ромашка", customer="Петров", status="PAYED",
           payments=[{"id": 1, "date": "01.03.2024", "method": "cash", "amount": 700}])
    create(api, customer="Частник")
    api.post(
        f"/api/files/tickets/{first['id']}/pdf",
        files={"file": ("act.pdf", b"%PDF-1.4 act", "application/pdf")},
    )

    companies = api.get("/api/orders/reports/companies").json()

    assert len(companies) == 1
    company = companies[0]
    assert company["name"] == "ООО Ромашка"
    assert company["orderCount"] == 2
    assert company["payed"] == 1
    assert company["inProgress"] == 1
    assert company["total"] == 1700
    assert company["orders"][0]["ticketUrl"] == f"/api/tickets/{first['id']}/pdf?filename=act.pdf"

    searched = api.get("/api/orders/reports/companies", params={"q": "петров"}).json()
    assert [o["customer"] for o in searched[0]["orders"]] == ["Петров"]
