from django.contrib import admin

from .models import Category, Comment, Download, Notification, Study, Validation


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ("name", "slug", "color", "created_at")
    prepopulated_fields = {"slug": ("name",)}
    search_fields = ("name",)


class ValidationInline(admin.TabularInline):
    model = Validation
    extra = 0
    can_delete = False
    readonly_fields = ("reviewer", "status", "notes", "reviewed_at")

    def has_add_permission(self, request, obj=None):
        return False


# Estado y publicación solo cambian desde studies.workflow
@admin.register(Study)
class StudyAdmin(admin.ModelAdmin):
    list_display = ("title", "author", "status", "is_published", "submitted_at", "published_at")
    list_filter = ("status", "is_published", "category")
    search_fields = ("title", "adviser", "author__email")
    readonly_fields = ("status", "is_published", "published_at", "submitted_at", "updated_at")
    inlines = [ValidationInline]


@admin.register(Validation)
class ValidationAdmin(admin.ModelAdmin):
    list_display = ("study", "reviewer", "status", "reviewed_at")
    list_filter = ("status",)

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False


@admin.register(Comment)
class CommentAdmin(admin.ModelAdmin):
    list_display = ("study", "author", "parent", "created_at")
    search_fields = ("body",)


admin.site.register(Download)
admin.site.register(Notification)
