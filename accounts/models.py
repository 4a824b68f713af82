from django.db import models


class UserProfile(models.Model):
    # uid issued by the identity provider; there is no local user table
    user_uid = models.CharField(max_length=128, primary_key=True)
    name = models.CharField(max_length=100)
    phone = models.CharField(max_length=20)
    updated_at = models.DateTimeField(auto_now=True)

    @property
    def is_complete(self):
        return bool(self.name.strip() and self.phone.strip())

    def __str__(self):
        return f"{self.name} ({self.phone})"


class AdminUser(models.Model):
    email = models.EmailField(unique=True)
    name = models.CharField(max_length=100, blank=True)
    created_by = models.EmailField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']

    def save(self, *args, **kwargs):
        self.email = self.email.strip().lower()
        super().save(*args, **kwargs)

    def __str__(self):
        return self.email
