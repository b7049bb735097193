from django.db.models import QuerySet


class SubmissionQuerySet(QuerySet):
    def for_coursework(self, coursework_id):
        return self.filter(coursework_id=coursework_id).select_related("student").order_by("-created_at")

    def for_student(self, student_id):
        return self.filter(student_id=student_id).select_related("coursework__course").order_by("-created_at")
