"""
Session 4: modeling and machine learning, top to bottom.

Regression (OLS, formula comparison, LASSO), classification (logistic
regression, trees, random forests) and clustering (k-means) on the Boston
listings. Figures are written to reports/ as standalone HTML files.

    python scripts/session_modeling.py [path/to/listings.csv]
"""

import os
import sys

import pandas as pd
from sklearn.ensemble import RandomForestRegressor

from airbnb_course.config import BASE_DIR, LISTINGS_FILE
from airbnb_course.data.clean import expand_amenities, process_listings
from airbnb_course.data.load_data import read_listings
from airbnb_course.models import classification as clf
from airbnb_course.models import regression as reg
from airbnb_course.models.clustering import NUMERIC_FEATURES, kmeans_clusters, numeric_listings
from airbnb_course.models.evaluate import gather_predictions
from airbnb_course.models.formula import FormulaModel
from airbnb_course.models.partition import resample_partition, sample_split
from airbnb_course.viz import plots

REPORTS_DIR = os.path.join(BASE_DIR, "reports")

FORMULAS = [
    "price ~ accommodates",
    "price ~ accommodates + review_scores_rating",
    "price ~ accommodates + review_scores_rating + property_type + neighbourhood_cleansed"
    " + accommodates * room_type",
]
ELEVATOR = "amenity_Elevator_in_Building"


def save(fig, name):
    os.makedirs(REPORTS_DIR, exist_ok=True)
    path = os.path.join(REPORTS_DIR, f"{name}.html")
    fig.write_html(path)
    print(f"Saved → {path}")


def regression(listings):
    print("\n## Regression")
    ols = reg.fit_ols("price ~ accommodates", listings)
    print(ols.summary())
    print(f"MSE = {reg.mse(ols):.2f}, R^2 = {reg.rsquare(ols, listings):.4f}")
    save(plots.model_fit_chart(reg.add_predictions(listings, ols), "accommodates", title="OLS Model Fit"), "ols_fit")
    save(plots.residual_chart(reg.add_residuals(listings, ols), "accommodates", boxplot=True,
                              title="OLS Model Residual Boxplots"), "ols_residuals")

    part = resample_partition(listings, {"train": 0.6, "val": 0.2, "test": 0.2}, seed=0)
    print(reg.compare_formulas(FORMULAS, part).drop(columns="model").to_string(index=False))

    X_all, y_all = reg.make_matrices({"all": listings}, FORMULAS[-1])["all"]
    path = reg.lasso_path_summary(X_all, y_all)
    for step in (0, 9, 19):
        print(f"lambda = {path.lambdas[step]:.3f}: {path.n_nonzero[step]} non-zero coefficients")
    save(plots.lasso_path_chart(path), "lasso_path")

    merged = {"train": pd.concat([part["train"], part["val"]]), "test": part["test"]}
    mats = reg.make_matrices(merged, FORMULAS[-1])
    cv = reg.fit_lasso_cv(*mats["train"])
    print(f"lambda.min = {cv.lambda_min:.4f} ({cv.n_nonzero_min} non-zero), "
          f"lambda.1se = {cv.lambda_1se:.4f} ({cv.n_nonzero_1se} non-zero)")
    print(f"Test R^2 at lambda.min: {reg.lasso_test_r2(cv, *mats['test']):.4f}")
    save(plots.lasso_cv_chart(cv), "lasso_cv")

    split = sample_split(listings["price"], 0.7, seed=123)
    train, test = listings[split], listings[~split]
    lm1 = reg.fit_ols("price ~ accommodates", train)
    rf = FormulaModel("price ~ accommodates", RandomForestRegressor(n_estimators=100, random_state=123)).fit(train)
    gathered = gather_predictions(train, {"lm": lm1, "rf": rf})
    save(plots.model_fit_chart(gathered, "accommodates", color="model", title="OLS vs random forest"), "lm_vs_rf")
    print(f"Test RMSE: lm={reg.rmse(lm1, test):.2f}, rf={reg.rmse(rf, test):.2f}")


def classification(raw):
    print("\n## Classification")
    big = expand_amenities(raw)
    if ELEVATOR not in big.columns:
        print(f"No {ELEVATOR} column in this export, skipping.")
        return
    glm_df = big[(big["property_type"] == "Apartment") & (big["price"] <= 500)].copy()
    glm_df[ELEVATOR] = glm_df[ELEVATOR].astype(int)
    glm_df["neighbourhood_cleansed"] = glm_df["neighbourhood_cleansed"].astype("category")
    split = sample_split(glm_df[ELEVATOR], 0.7, seed=123)
    train, test = glm_df[split], glm_df[~split]

    for formula in (f"{ELEVATOR} ~ price", f"{ELEVATOR} ~ price + neighbourhood_cleansed"):
        model = clf.fit_logistic(formula, train)
        probs = clf.predict_proba(model, test)
        truth = test.loc[probs.index, ELEVATOR]
        print(f"{formula}: AUC = {clf.auc(truth, probs):.4f}")
    save(plots.roc_chart(clf.roc_table(truth, probs), clf.auc(truth, probs)), "roc")

    formula = f"{ELEVATOR} ~ price + neighbourhood_cleansed"
    tree = clf.fit_tree(formula, train)
    for name, data in (("train", train), ("test", test)):
        table = clf.confusion_matrix(data[ELEVATOR], clf.classify(tree.predict_proba(data)))
        print(f"Tree {name} accuracy: {clf.accuracy(table):.4f}")
    print(f"Baseline accuracy: {clf.baseline_accuracy(test[ELEVATOR]):.4f}")

    big_tree = clf.fit_tree(formula, train, ccp_alpha=0.0)
    cp = clf.cp_table(big_tree)
    print(cp.to_string(index=False))
    final = clf.prune_tree(big_tree, clf.best_ccp_alpha(cp))
    print(f"Pruned tree: {final.estimator.get_n_leaves()} leaves")

    for n_trees in (5, 100):
        rf = clf.fit_forest(formula, train, n_trees=n_trees, seed=123)
        oob = clf.accuracy(clf.confusion_matrix(rf.y_, clf.oob_predictions(rf)))
        test_acc = clf.accuracy(clf.confusion_matrix(test[ELEVATOR], rf.predict(test)))
        print(f"Random forest ({n_trees} trees): OOB accuracy {oob:.4f}, test accuracy {test_acc:.4f}")


def clustering(raw):
    print("\n## Clustering")
    numeric = numeric_listings(raw)
    result = kmeans_clusters(numeric, NUMERIC_FEATURES, k=5, seed=1234)
    print(result.centers.round(2).to_string())
    print(result.sizes.to_string())
    save(plots.listings_map(numeric.assign(cluster=result.labels), color="cluster"), "kmeans_map")


def main():
    path = sys.argv[1] if len(sys.argv) > 1 else LISTINGS_FILE
    raw = read_listings(path)
    listings = process_listings(raw)
    print(listings.head())

    regression(listings)
    classification(raw)
    clustering(raw)


if __name__ == "__main__":
    main()
