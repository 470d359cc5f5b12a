from django.apps import AppConfig


class AppraisalAppConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'appraisal_app'
    verbose_name = 'Performance appraisal scoring'
