from datetime import date

import pandas as pd
import streamlit as st

from airbnb_course.config import CALENDAR_FILE, LISTINGS_FILE
from airbnb_course.data.load_data import read_calendar, read_listings
from airbnb_course.models.predict import predict_price
from airbnb_course.viz.plots import histogram_chart, listings_map
from airbnb_course.wrangling.availability import get_availability_table, prepare_dashboard_data

st.set_page_config(page_title="Boston Airbnb", layout="wide")
st.title("Boston Airbnb")

DEFAULT_WEEKEND = date(2020, 2, 14)


@st.cache_data
def load_dashboard_data():
    listings = read_listings(LISTINGS_FILE)
    calendar = read_calendar(CALENDAR_FILE)
    data = prepare_dashboard_data(listings, calendar)
    first, last = calendar["date"].min().date(), calendar["date"].max().date()
    return data.top_rated, data.stays, first, last


@st.cache_data
def availability(stays: pd.DataFrame, top_rated: pd.DataFrame, ndays: int, npeople: int) -> pd.DataFrame:
    return get_availability_table(stays, top_rated, ndays, npeople)


try:
    top_rated, stays, first_day, last_day = load_dashboard_data()
except (FileNotFoundError, ValueError) as e:
    st.error(f"Could not load the Airbnb data: {e}")
    st.stop()

st.sidebar.header("Your stay")
ndays = st.sidebar.slider("Days", min_value=0, max_value=10, value=1, step=1)
npeople = st.sidebar.slider("People", min_value=1, max_value=10, value=1, step=1)
default_day = min(max(DEFAULT_WEEKEND, first_day), last_day)
weekend_of = st.sidebar.date_input("Weekend of:", value=default_day, min_value=first_day, max_value=last_day)

table = availability(stays, top_rated, ndays, npeople)
toplot = table[pd.to_datetime(table["stay_start"]).dt.date == weekend_of]

col1, col2 = st.columns([1, 1])
with col1:
    if toplot.empty:
        st.info("No top-rated listing is available for this stay. Try another weekend or fewer people.")
    else:
        st.plotly_chart(
            histogram_chart(toplot, "price_per_day_person", title="Price per day per person"),
            use_container_width=True,
        )
with col2:
    st.plotly_chart(
        listings_map(
            toplot,
            hover_name="name" if "name" in toplot.columns else None,
            hover_data=["price_per_day_person", "accommodates"],
            title=f"{len(toplot)} listings",
        ),
        use_container_width=True,
    )

st.markdown("---")

with st.expander("Estimate a nightly price"):
    neighbourhoods = sorted(top_rated["neighbourhood_cleansed"].dropna().astype(str).unique().tolist())
    input_dict = {
        "neighbourhood_cleansed": st.selectbox("Neighbourhood", neighbourhoods) if neighbourhoods else "",
        "property_type": st.text_input("Property Type", value="Apartment"),
        "room_type": st.selectbox("Room Type", ["Entire home/apt", "Private room", "Shared room"]),
        "accommodates": int(st.number_input("Accommodates", 1, 16, 2)),
        "bedrooms": int(st.number_input("Bedrooms", 0, 10, 1)),
        "beds": int(st.number_input("Beds", 0, 16, 1)),
        "bathrooms": float(st.number_input("Bathrooms", 0.0, 10.0, 1.0, step=0.5)),
    }
    if st.button("Predict Price"):
        try:
            price = predict_price(input_dict)
            st.markdown(f"<h1 style='margin:0'>${price:,.2f}</h1>", unsafe_allow_html=True)
            st.caption("Predicted price per night")
        except RuntimeError as e:
            st.error(f"Prediction failed: {e}")
