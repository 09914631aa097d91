# apps/domains/exams/migrations/0001_initial.py
from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        # ==============================
        # Exam
        # ==============================
        migrations.CreateModel(
            name="Exam",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("title", models.CharField(max_length=255)),
                ("description", models.TextField(blank=True)),
                ("is_published", models.BooleanField(default=False)),
                ("open_at", models.DateTimeField(blank=True, null=True)),
                ("close_at", models.DateTimeField(blank=True, null=True)),
                ("duration_seconds", models.PositiveIntegerField(default=1800)),
                ("auto_submit", models.BooleanField(default=True)),
                ("shuffle_questions", models.BooleanField(default=False)),
                (
                    "result_visibility",
                    models.CharField(
                        choices=[
                            ("immediate", "제출 직후 공개"),
                            ("after_grading", "채점 완료 후 공개"),
                        ],
                        default="after_grading",
                        max_length=20,
                    ),
                ),
                ("password", models.CharField(blank=True, max_length=128)),
                ("max_attempts", models.PositiveIntegerField(blank=True, default=1, null=True)),
                (
                    "creator",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="created_exams",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "exams_exam",
                "ordering": ["-created_at"],
            },
        ),

        # ==============================
        # ExamQuestion
        # ==============================
        migrations.CreateModel(
            name="ExamQuestion",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("number", models.PositiveIntegerField()),
                (
                    "question_type",
                    models.CharField(
                        choices=[
                            ("single_select", "단일 선택"),
                            ("multi_select", "복수 선택"),
                            ("true_false", "O/X"),
                            ("short_text", "단답형"),
                            ("long_text", "서술형"),
                        ],
                        max_length=20,
                    ),
                ),
                ("text", models.TextField(blank=True)),
                ("options", models.JSONField(blank=True, default=list)),
                ("correct_answer", models.JSONField(blank=True, null=True)),
                ("points", models.FloatField(default=1.0)),
                ("time_limit_seconds", models.PositiveIntegerField(blank=True, null=True)),
                ("explanation", models.TextField(blank=True)),
                (
                    "exam",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="questions",
                        to="exams.exam",
                    ),
                ),
            ],
            options={
                "db_table": "exams_question",
                "ordering": ["number"],
                "unique_together": {("exam", "number")},
            },
        ),
    ]
