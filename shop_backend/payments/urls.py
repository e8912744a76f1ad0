# payments/urls.py

from django.urls import path

from payments.views import ConfirmPaymentView, CreatePaymentIntentView, PaymentConfigView

app_name = "payments"

urlpatterns = [
    path("config/", PaymentConfigView.as_view(), name="config"),
    path("create-intent/", CreatePaymentIntentView.as_view(), name="create-intent"),
    path("confirm/", ConfirmPaymentView.as_view(), name="confirm"),
]
