"""
URL configuration for sales app.
"""

from django.urls import path

from . import views

app_name = "sales"

urlpatterns = [
    # Store selection and POS sessions
    path("api/pos/stores/", views.pos_stores, name="pos_stores"),
    path("api/pos/session/", views.pos_open_session, name="pos_open_session"),
    path("api/pos/session/<str:session_id>/", views.pos_close_session, name="pos_close_session"),
    # Cart
    path("api/pos/session/<str:session_id>/cart/", views.pos_cart, name="pos_cart"),
    path("api/pos/session/<str:session_id>/cart/lines/", views.pos_add_line, name="pos_add_line"),
    path(
        "api/pos/session/<str:session_id>/cart/lines/<int:product_id>/",
        views.pos_cart_line,
        name="pos_cart_line",
    ),
    # Checkout
    path("api/pos/session/<str:session_id>/checkout/", views.pos_checkout, name="pos_checkout"),
    # Sale history and analytics
    path(
        "api/pos/stores/<uuid:store_id>/sales/", views.SaleListView.as_view(), name="store_sales"
    ),
    path("api/pos/sales/<str:sale_id>/", views.SaleDetailView.as_view(), name="sale_detail"),
    path("api/pos/stores/<uuid:store_id>/summary/", views.store_summary, name="store_summary"),
]
