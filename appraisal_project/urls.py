from django.urls import include, path

urlpatterns = [
    path("api/", include("appraisal_app.urls.api")),
]
