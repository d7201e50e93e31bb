from django.urls import path

from accounts.views import SignupView

urlpatterns = [
    path("auth/register", SignupView.as_view(), name="signup"),
]
