# apps/domains/exam_sessions/migrations/0001_initial.py
from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("exams", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        # ==============================
        # ExamSession
        # ==============================
        migrations.CreateModel(
            name="ExamSessionModel",
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
                ("session_id", models.CharField(max_length=64, unique=True)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("ACTIVE", "응시 중"),
                            ("EXPIRED", "만료"),
                            ("SUBMITTED", "제출"),
                            ("GRADED", "채점 완료"),
                        ],
                        default="ACTIVE",
                        max_length=20,
                    ),
                ),
                ("started_at", models.DateTimeField()),
                ("deadline", models.DateTimeField()),
                ("enforce_at", models.DateTimeField(db_index=True)),
                ("auto_submit", models.BooleanField(default=True)),
                ("window_close_at", models.DateTimeField(blank=True, null=True)),
                ("question_order", models.JSONField(blank=True, default=list)),
                ("max_score", models.FloatField(default=0.0)),
                ("exam_snapshot", models.JSONField(blank=True, null=True)),
                ("submitted_at", models.DateTimeField(blank=True, null=True)),
                ("submit_reason", models.CharField(blank=True, max_length=20)),
                ("expired_at", models.DateTimeField(blank=True, null=True)),
                ("auto_graded", models.BooleanField(default=False)),
                ("auto_score", models.FloatField(default=0.0)),
                ("manual_score", models.FloatField(default=0.0)),
                ("final_score", models.FloatField(blank=True, null=True)),
                ("feedback", models.TextField(blank=True)),
                ("graded_at", models.DateTimeField(blank=True, null=True)),
                ("graded_by", models.CharField(blank=True, max_length=64)),
                ("last_activity_at", models.DateTimeField(blank=True, null=True)),
                (
                    "exam",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="sessions",
                        to="exams.exam",
                    ),
                ),
                (
                    "student",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="exam_sessions",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "exam_session",
                "ordering": ["-started_at"],
            },
        ),
        migrations.AddConstraint(
            model_name="examsessionmodel",
            constraint=models.UniqueConstraint(
                condition=models.Q(("status", "ACTIVE")),
                fields=("exam", "student"),
                name="uniq_active_session_per_exam_student",
            ),
        ),
        migrations.AddIndex(
            model_name="examsessionmodel",
            index=models.Index(fields=["status", "enforce_at"], name="exam_session_sweep_idx"),
        ),
        migrations.AddIndex(
            model_name="examsessionmodel",
            index=models.Index(fields=["exam", "student"], name="exam_session_attempt_idx"),
        ),

        # ==============================
        # AnswerRecord
        # ==============================
        migrations.CreateModel(
            name="AnswerRecordModel",
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
                ("question_id", models.CharField(max_length=64)),
                ("value", models.JSONField(blank=True, null=True)),
                ("time_spent_seconds", models.FloatField(default=0.0)),
                ("saved_at", models.DateTimeField(blank=True, null=True)),
                ("outcome", models.CharField(default="pending", max_length=20)),
                ("auto_score", models.FloatField(default=0.0)),
                ("manual_score", models.FloatField(blank=True, null=True)),
                ("feedback", models.TextField(blank=True, null=True)),
                (
                    "session",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="answers",
                        to="exam_sessions.examsessionmodel",
                    ),
                ),
            ],
            options={
                "db_table": "exam_session_answer",
            },
        ),
        migrations.AddConstraint(
            model_name="answerrecordmodel",
            constraint=models.UniqueConstraint(
                fields=("session", "question_id"),
                name="uniq_answer_per_session_question",
            ),
        ),
    ]
