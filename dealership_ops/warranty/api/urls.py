from rest_framework.routers import SimpleRouter
from .views import LoanCarViewSet, WarrantyClaimViewSet

router = SimpleRouter()
router.register(r'warranty-claims', WarrantyClaimViewSet, basename='warranty-claim')
router.register(r'loan-cars', LoanCarViewSet, basename='loan-car')

urlpatterns = router.urls
