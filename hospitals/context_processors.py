from .permissions import active_membership


def hospital_context(request):
    if not request.user.is_authenticated:
        return {"hospital_membership": None}
    return {"hospital_membership": active_membership(request.user)}
