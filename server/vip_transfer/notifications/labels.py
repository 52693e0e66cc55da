"""Localised labels shared by itinerary documents and emails."""

FALLBACK_LANGUAGE = "tr"

LABELS: dict[str, dict[str, str]] = {
    "tr": {
        "ArrivalInfo": "Geliş Bilgileri",
        "ReturnInfo": "Dönüş Bilgileri",
        "FullName": "Adı Soyadı",
        "Phone": "Telefon",
        "Email": "E-posta",
        "PickupPoint": "Alış Noktası",
        "DropoffPoint": "Varış Noktası",
        "ArrivalDate": "Geliş Tarihi",
        "ArrivalFlight": "Geliş Uçuş Numarası",
        "Airline": "Havayolu Şirketi",
        "HotelName": "Otel Adı",
        "Passengers": "Yolcular",
        "VehicleType": "Araç Türü",
        "Price": "Fiyat",
        "Adults": "Yetişkin Sayısı",
        "Children": "Çocuk Sayısı",
        "ChildSeats": "Çocuk Koltuğu Sayısı",
        "SpecialNote": "Özel Not",
        "ReturnDate": "Dönüş Tarihi",
        "ReturnFlight": "Dönüş Uçuş Numarası",
        "PickupTime": "Araç Alış Saati",
    },
    "en": {
        "ArrivalInfo": "Arrival Information",
        "ReturnInfo": "Return Information",
        "FullName": "Full Name",
        "Phone": "Phone",
        "Email": "Email",
        "PickupPoint": "Pick-up Point",
        "DropoffPoint": "Drop-off Point",
        "ArrivalDate": "Arrival Date",
        "ArrivalFlight": "Arrival Flight Number",
        "Airline": "Airline",
        "HotelName": "Hotel Name",
        "Passengers": "Passengers",
        "VehicleType": "Vehicle Type",
        "Price": "Price",
        "Adults": "Number of Adults",
        "Children": "Number of Children",
        "ChildSeats": "Child Seats",
        "SpecialNote": "Special Note",
        "ReturnDate": "Return Date",
        "ReturnFlight": "Return Flight Number",
        "PickupTime": "Pick-up Time",
    },
    "de": {
        "ArrivalInfo": "Ankunftsinformationen",
        "ReturnInfo": "Rückreiseinformationen",
        "FullName": "Vollständiger Name",
        "Phone": "Telefon",
        "Email": "E-Mail",
        "PickupPoint": "Abholort",
        "DropoffPoint": "Zielort",
        "ArrivalDate": "Ankunftsdatum",
        "ArrivalFlight": "Ankunftsflugnummer",
        "Airline": "Fluggesellschaft",
        "HotelName": "Hotelname",
        "Passengers": "Passagiere",
        "VehicleType": "Fahrzeugtyp",
        "Price": "Preis",
        "Adults": "Anzahl Erwachsene",
        "Children": "Anzahl Kinder",
        "ChildSeats": "Kindersitze",
        "SpecialNote": "Besondere Hinweise",
        "ReturnDate": "Rückreisedatum",
        "ReturnFlight": "Rückflugnummer",
        "PickupTime": "Abholzeit",
    },
    "ru": {
        "ArrivalInfo": "Информация о прибытии",
        "ReturnInfo": "Информация об обратном трансфере",
        "FullName": "ФИО",
        "Phone": "Телефон",
        "Email": "Эл. почта",
        "PickupPoint": "Место посадки",
        "DropoffPoint": "Место высадки",
        "ArrivalDate": "Дата прибытия",
        "ArrivalFlight": "Номер рейса прибытия",
        "Airline": "Авиакомпания",
        "HotelName": "Название отеля",
        "Passengers": "Пассажиры",
        "VehicleType": "Тип автомобиля",
        "Price": "Цена",
        "Adults": "Взрослых",
        "Children": "Детей",
        "ChildSeats": "Детских кресел",
        "SpecialNote": "Особые пожелания",
        "ReturnDate": "Дата обратного трансфера",
        "ReturnFlight": "Номер обратного рейса",
        "PickupTime": "Время посадки",
    },
}

CUSTOMER_SUBJECTS = {
    "tr": "Rezervasyon Onayı - #{id} | {brand}",
    "en": "Reservation Confirmation - #{id} | {brand}",
    "de": "Reservierungsbestätigung - #{id} | {brand}",
    "ru": "Подтверждение бронирования - #{id} | {brand}",
}

ADMIN_SUBJECT = "Yeni Rezervasyon - #{id} | {name}"

CURRENCY_SYMBOLS = {"USD": "$", "TRY": "₺", "GBP": "£"}


def document_language(lang: str | None) -> str:
    """Language used for a document; unknown codes fall back to Turkish."""
    code = (lang or "").lower()
    return code if code in LABELS else FALLBACK_LANGUAGE


def labels_for(lang: str | None) -> dict[str, str]:
    return LABELS[document_language(lang)]


def currency_symbol(currency: str | None) -> str:
    return CURRENCY_SYMBOLS.get((currency or "").upper(), "€")


def customer_subject(reservation_id: int, lang: str | None, brand: str) -> str:
    return CUSTOMER_SUBJECTS[document_language(lang)].format(id=reservation_id, brand=brand)


def admin_subject(reservation_id: int, customer_name: str) -> str:
    return ADMIN_SUBJECT.format(id=reservation_id, name=customer_name)
