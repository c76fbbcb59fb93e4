from django.urls import path

from .views import (
    home,
    catalog,
    study_detail,
    download_study,
    my_submissions,
    CatalogAPI,
    SubmitStudyView,
    DeleteStudyAPI,
    PostCommentAPI,
    DeleteCommentAPI,
    MarkNotificationsReadAPI,
    AdminDashboardView,
    SubmissionsQueueView,
    ValidateStudyAPI,
    AdminStudiesView,
    TogglePublishAPI,
    AdminCategoriesView,
    DeleteCategoryAPI,
)

urlpatterns = [
    # Público
    path("", home, name="home"),
    path("studies/", catalog, name="catalog"),
    path("studies/submit/", SubmitStudyView.as_view(), name="submit_study"),
    path("studies/mine/", my_submissions, name="my_submissions"),
    path("studies/<uuid:pk>/", study_detail, name="study_detail"),
    path("studies/<uuid:pk>/download/", download_study, name="download_study"),

    # Panel admin / revisor
    path("admin/", AdminDashboardView.as_view(), name="admin_dashboard"),
    path("admin/submissions/", SubmissionsQueueView.as_view(), name="admin_submissions"),
    path("admin/studies/", AdminStudiesView.as_view(), name="admin_studies"),
    path("admin/categories/", AdminCategoriesView.as_view(), name="admin_categories"),

    # APIs que consume el JS
    path("api/studies/", CatalogAPI.as_view(), name="api_catalog"),
    path("api/studies/<uuid:pk>/delete/", DeleteStudyAPI.as_view(), name="api_delete_study"),
    path("api/studies/<uuid:pk>/validate/", ValidateStudyAPI.as_view(), name="api_validate_study"),
    path("api/studies/<uuid:pk>/publish/", TogglePublishAPI.as_view(), name="api_toggle_publish"),
    path("api/studies/<uuid:pk>/comments/", PostCommentAPI.as_view(), name="api_post_comment"),
    path("api/comments/<int:comment_id>/delete/", DeleteCommentAPI.as_view(), name="api_delete_comment"),
    path("api/categories/<int:category_id>/delete/", DeleteCategoryAPI.as_view(), name="api_delete_category"),
    path("api/notifications/read/", MarkNotificationsReadAPI.as_view(), name="api_mark_notifications_read"),
]
