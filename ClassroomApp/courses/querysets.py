from django.db.models import QuerySet


class CourseQuerySet(QuerySet):
    def for_teacher(self, teacher_id):
        return self.filter(teacher_id=teacher_id)

    def where_enrolled(self, student_id):
        return self.filter(enrollments__student_id=student_id).distinct()


class EnrollmentQuerySet(QuerySet):
    def for_course(self, course_id):
        return self.filter(course_id=course_id).select_related("student").order_by("-created_at")

    def for_student(self, student_id):
        return self.filter(student_id=student_id).select_related("course__teacher").order_by("-created_at")

    def taught_by(self, teacher_id):
        return self.filter(course__teacher_id=teacher_id)
